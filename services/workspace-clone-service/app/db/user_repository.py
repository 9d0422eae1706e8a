# services/workspace-clone-service/app/db/user_repository.py
from __future__ import annotations

from typing import Optional

from pymongo import ReturnDocument

from app.db.base_repository import DocumentRepository, _PROJECTION, _utcnow
from app.models import User


class UserRepository(DocumentRepository[User]):
    collection_name = "users"
    model = User

    async def link_examples_workspace(self, user_id: str, workspace_id: str) -> Optional[User]:
        """
        Single atomic write: the user now owns a cloned examples workspace, so no
        further clone is needed for them.
        """
        doc = await self._col.find_one_and_update(
            {"id": user_id},
            {"$set": {"examples_workspace_id": workspace_id, "updated_at": _utcnow()}},
            projection=_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)
