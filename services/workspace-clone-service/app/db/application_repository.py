# services/workspace-clone-service/app/db/application_repository.py
from __future__ import annotations

from typing import List

from app.db.base_repository import DocumentRepository, _utcnow
from app.models import Application, ApplicationPage


class ApplicationRepository(DocumentRepository[Application]):
    collection_name = "applications"
    model = Application

    async def find_public_by_workspace_id(self, workspace_id: str) -> List[Application]:
        return await self._find({"workspace_id": workspace_id, "is_public": True})

    async def push_page(self, application_id: str, page: ApplicationPage) -> None:
        # $push keeps concurrent page creation under one application lossless
        await self._col.update_one(
            {"id": application_id},
            {"$push": {"pages": page.model_dump(mode="json")}, "$set": {"updated_at": _utcnow()}},
        )

    async def set_default_page(self, application_id: str, page_id: str) -> bool:
        await self._col.update_one(
            {"id": application_id},
            {"$set": {"pages.$[].is_default": False}},
        )
        res = await self._col.update_one(
            {"id": application_id, "pages.id": page_id},
            {"$set": {"pages.$.is_default": True, "updated_at": _utcnow()}},
        )
        return res.matched_count == 1
