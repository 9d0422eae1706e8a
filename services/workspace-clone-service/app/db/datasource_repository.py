# services/workspace-clone-service/app/db/datasource_repository.py
from __future__ import annotations

from typing import List

from app.db.base_repository import DocumentRepository
from app.models import Datasource


class DatasourceRepository(DocumentRepository[Datasource]):
    collection_name = "datasources"
    model = Datasource

    async def find_by_workspace_id(self, workspace_id: str) -> List[Datasource]:
        return await self._find({"workspace_id": workspace_id})
