# services/workspace-clone-service/app/db/page_repository.py
from __future__ import annotations

from typing import List

from app.db.base_repository import DocumentRepository
from app.models import Page


class PageRepository(DocumentRepository[Page]):
    collection_name = "pages"
    model = Page

    async def find_by_application_id(self, application_id: str) -> List[Page]:
        return await self._find({"application_id": application_id})
