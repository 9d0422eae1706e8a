# services/workspace-clone-service/app/api/routers/clone_routes.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_cloner
from app.cloning import (
    CloneStoreError,
    DatasourceResolutionError,
    InvalidTemplateError,
    WorkspaceCloneError,
    WorkspaceCloner,
)
from app.models import CloneOutcome, ExamplesCloneRequest, StartCloneRequest, User

router = APIRouter(prefix="/clones", tags=["clones"])
logger = logging.getLogger("app.api.clones")


async def _load_user(cloner: WorkspaceCloner, user_id: str) -> User:
    user = await cloner.repos.users.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _to_http(e: WorkspaceCloneError) -> HTTPException:
    if isinstance(e, InvalidTemplateError):
        return HTTPException(status_code=422, detail=f"Invalid template: {e}")
    if isinstance(e, DatasourceResolutionError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, CloneStoreError):
        return HTTPException(status_code=502, detail=f"Store failure: {e}")
    return HTTPException(status_code=500, detail=str(e))


@router.post("/examples", response_model=CloneOutcome)
async def clone_examples_workspace(payload: ExamplesCloneRequest, cloner: WorkspaceCloner = Depends(get_cloner)):
    """
    Clone the configured template workspace for the user, once.
    Already-linked users and a missing template both come back as `skipped`.
    """
    user = await _load_user(cloner, payload.user_id)
    try:
        return await cloner.clone_examples_workspace(user)
    except WorkspaceCloneError as e:
        raise _to_http(e) from e


@router.post("", response_model=CloneOutcome)
async def clone_workspace(payload: StartCloneRequest, cloner: WorkspaceCloner = Depends(get_cloner)):
    """Clone an explicit template workspace for the user."""
    user = await _load_user(cloner, payload.user_id)
    try:
        return await cloner.clone_workspace_for_user(payload.template_workspace_id, user)
    except WorkspaceCloneError as e:
        raise _to_http(e) from e
