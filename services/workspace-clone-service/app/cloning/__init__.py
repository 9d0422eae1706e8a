# services/workspace-clone-service/app/cloning/__init__.py
from .errors import (
    CloneStoreError,
    DatasourceResolutionError,
    InvalidTemplateError,
    WorkspaceCloneError,
)
from .orchestrator import CloneRun, WorkspaceCloner

__all__ = [
    "CloneRun",
    "CloneStoreError",
    "DatasourceResolutionError",
    "InvalidTemplateError",
    "WorkspaceCloneError",
    "WorkspaceCloner",
]
