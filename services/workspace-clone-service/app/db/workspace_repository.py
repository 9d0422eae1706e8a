# services/workspace-clone-service/app/db/workspace_repository.py
from __future__ import annotations

from app.db.base_repository import DocumentRepository
from app.models import Workspace


class WorkspaceRepository(DocumentRepository[Workspace]):
    collection_name = "workspaces"
    model = Workspace

    async def slug_exists(self, slug: str) -> bool:
        return await self._col.count_documents({"slug": slug}) > 0
