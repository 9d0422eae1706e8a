# services/workspace-clone-service/app/cloning/context.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass

from app.cloning.datasource_clone_set import DatasourceCloneSet
from app.db.repositories import Repositories
from app.services import ActionService, ApplicationPageService


@dataclass
class CloneContext:
    """Per-run wiring shared by the streams. Lives exactly as long as one run."""
    run_id: str
    source_workspace_id: str
    target_workspace_id: str
    repos: Repositories
    application_pages: ApplicationPageService
    action_service: ActionService
    datasources: DatasourceCloneSet
    write_limit: asyncio.Semaphore
