# services/workspace-clone-service/app/models/__init__.py
from .workspace_models import (
    SENSITIVE_AUTH_FIELDS,
    Policy,
    BaseDocument,
    UserRole,
    Workspace,
    User,
    ApplicationPage,
    Application,
    ActionReference,
    Layout,
    Page,
    AuthenticationBlock,
    DatasourceConfiguration,
    Datasource,
    Action,
)

from .clone_models import (
    CloneState,
    CloneOutcomeStatus,
    ActionIdPair,
    PageCandidate,
    ClonedPage,
    ClonedPageActions,
    GraphCloneResult,
    ReferenceInconsistency,
    ClonedWorkspaceHandle,
    CloneOutcome,
    ExamplesCloneRequest,
    StartCloneRequest,
)

__all__ = [
    # workspace_models
    "SENSITIVE_AUTH_FIELDS",
    "Policy",
    "BaseDocument",
    "UserRole",
    "Workspace",
    "User",
    "ApplicationPage",
    "Application",
    "ActionReference",
    "Layout",
    "Page",
    "AuthenticationBlock",
    "DatasourceConfiguration",
    "Datasource",
    "Action",
    # clone_models
    "CloneState",
    "CloneOutcomeStatus",
    "ActionIdPair",
    "PageCandidate",
    "ClonedPage",
    "ClonedPageActions",
    "GraphCloneResult",
    "ReferenceInconsistency",
    "ClonedWorkspaceHandle",
    "CloneOutcome",
    "ExamplesCloneRequest",
    "StartCloneRequest",
]
