# services/workspace-clone-service/app/api/deps.py
from __future__ import annotations

from app.cloning import WorkspaceCloner
from app.config import settings
from app.db.mongodb import get_client
from app.db.repositories import Repositories
from app.events.rabbit import get_bus


def get_cloner() -> WorkspaceCloner:
    return WorkspaceCloner(
        Repositories.from_client(get_client(), settings.mongo_db),
        bus=get_bus() if settings.events_enabled else None,
    )
