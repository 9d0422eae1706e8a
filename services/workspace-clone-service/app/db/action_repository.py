# services/workspace-clone-service/app/db/action_repository.py
from __future__ import annotations

from typing import List

from app.db.base_repository import DocumentRepository
from app.models import Action


class ActionRepository(DocumentRepository[Action]):
    collection_name = "actions"
    model = Action

    async def find_by_page_id(self, page_id: str) -> List[Action]:
        return await self._find({"page_id": page_id})
