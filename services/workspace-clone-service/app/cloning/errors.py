# services/workspace-clone-service/app/cloning/errors.py
from __future__ import annotations

from typing import Optional


class WorkspaceCloneError(RuntimeError):
    """Fatal to a clone run. Entities written before the failure are not retracted."""


class InvalidTemplateError(WorkspaceCloneError):
    def __init__(self, message: str, *, entity: str = "datasource") -> None:
        super().__init__(message)
        self.entity = entity


class DatasourceResolutionError(WorkspaceCloneError):
    def __init__(self, *, action_id: Optional[str], datasource_id: str) -> None:
        super().__init__(
            f"Action {action_id} references datasource {datasource_id} which has no clone in this run"
        )
        self.action_id = action_id
        self.datasource_id = datasource_id


class CloneStoreError(WorkspaceCloneError):
    """A store read/write failed mid-run; no retry at this layer."""
