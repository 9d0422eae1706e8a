from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.api.deps import get_cloner
from app.cloning import WorkspaceCloner
from app.config import settings

router = APIRouter(tags=["meta"])


@router.get("/health", summary="Liveness probe")
def health() -> Dict[str, Any]:
    return {"status": "ok", "service": settings.service_name, "version": settings.service_version}


@router.get("/ready", summary="Readiness probe")
async def ready(cloner: WorkspaceCloner = Depends(get_cloner)) -> Dict[str, Any]:
    """
    Ready once the store answers. `template_configured` is false when the
    examples flow would skip every user (no stored config, no TEMPLATE_WORKSPACE_ID).
    """
    template_workspace_id = await cloner.template_config.get_template_workspace_id()
    return {
        "status": "ready",
        "db": settings.mongo_db,
        "template_configured": template_workspace_id is not None,
        "clone_concurrency": cloner.concurrency,
        "events_enabled": settings.events_enabled,
    }
