# services/workspace-clone-service/app/db/base_repository.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar
from uuid import uuid4

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from app.models import BaseDocument

logger = logging.getLogger("app.db")

T = TypeVar("T", bound=BaseDocument)

# Mongo's own `_id` never reaches the models.
_PROJECTION = {"_id": 0}

NOT_DELETED: Dict[str, Any] = {"deleted": {"$ne": True}}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_entity_id() -> str:
    return str(uuid4())


class DocumentRepository(Generic[T]):
    """
    Point reads/writes for one entity collection.
    - create(): allocates a fresh `id` when the entity has none (new document).
    - save(): full replace of an existing document, keyed by `id`.
    Subclasses add the owner-scoped reads their collection needs.
    """

    collection_name: ClassVar[str] = ""
    model: ClassVar[Type[BaseDocument]]

    def __init__(self, client: AsyncIOMotorClient, db_name: str) -> None:
        self._db = client[db_name]
        self._col: AsyncIOMotorCollection = self._db[self.collection_name]

    def _to_model(self, doc: Optional[Dict[str, Any]]) -> Optional[T]:
        return self.model.model_validate(doc) if doc else None  # type: ignore[return-value]

    async def _find(self, filt: Dict[str, Any]) -> List[T]:
        cursor = self._col.find({**filt, **NOT_DELETED}, _PROJECTION)
        return [self.model.model_validate(d) async for d in cursor]  # type: ignore[misc]

    async def get(self, entity_id: str) -> Optional[T]:
        doc = await self._col.find_one({"id": entity_id, **NOT_DELETED}, _PROJECTION)
        return self._to_model(doc)

    async def create(self, entity: T) -> T:
        now = _utcnow()
        created = entity.model_copy(
            update={
                "id": entity.id or new_entity_id(),
                "created_at": now,
                "updated_at": now,
            }
        )
        await self._col.insert_one(created.model_dump(mode="json"))
        logger.debug("%s: created %s", self.collection_name, created.id)
        return created

    async def save(self, entity: T) -> T:
        if not entity.id:
            raise ValueError(f"{self.collection_name}: save() needs an id; use create() for new documents")
        saved = entity.model_copy(update={"updated_at": _utcnow()})
        await self._col.replace_one({"id": saved.id}, saved.model_dump(mode="json"), upsert=True)
        return saved
