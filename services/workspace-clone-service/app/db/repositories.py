# services/workspace-clone-service/app/db/repositories.py
from __future__ import annotations

from dataclasses import dataclass

from motor.motor_asyncio import AsyncIOMotorClient

from app.db.action_repository import ActionRepository
from app.db.application_repository import ApplicationRepository
from app.db.config_repository import ConfigRepository
from app.db.datasource_repository import DatasourceRepository
from app.db.page_repository import PageRepository
from app.db.user_repository import UserRepository
from app.db.workspace_repository import WorkspaceRepository


@dataclass
class Repositories:
    workspaces: WorkspaceRepository
    applications: ApplicationRepository
    pages: PageRepository
    actions: ActionRepository
    datasources: DatasourceRepository
    users: UserRepository
    config: ConfigRepository

    @classmethod
    def from_client(cls, client: AsyncIOMotorClient, db_name: str) -> "Repositories":
        return cls(
            workspaces=WorkspaceRepository(client, db_name),
            applications=ApplicationRepository(client, db_name),
            pages=PageRepository(client, db_name),
            actions=ActionRepository(client, db_name),
            datasources=DatasourceRepository(client, db_name),
            users=UserRepository(client, db_name),
            config=ConfigRepository(client, db_name),
        )
