# services/workspace-clone-service/app/models/clone_models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from app.models.workspace_models import Application, Page, Workspace


# ─────────────────────────────────────────────────────────────
# Run lifecycle
# ─────────────────────────────────────────────────────────────

class CloneState(str, Enum):
    NOT_STARTED = "not_started"
    TEMPLATE_RESOLVED = "template_resolved"
    DATASOURCES_IN_FLIGHT = "datasources_in_flight"
    GRAPH_STREAMING = "graph_streaming"  # runs alongside the datasource clone set
    REMAP_COMPLETE = "remap_complete"
    REFERENCES_REWRITTEN = "references_rewritten"
    DATASOURCES_COMPLETE = "datasources_complete"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


class CloneOutcomeStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


# ─────────────────────────────────────────────────────────────
# Transient per-run values (never persisted)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ActionIdPair:
    source_action_id: str
    cloned_action_id: str


@dataclass(frozen=True)
class PageCandidate:
    """A source page already re-parented to its cloned application, not yet written."""
    page: Page
    source_page_id: str
    is_default: bool


@dataclass(frozen=True)
class ClonedPage:
    source_page_id: str
    page: Page


@dataclass(frozen=True)
class ClonedPageActions:
    """Result of cloning one page and every action under it."""
    page: ClonedPage
    action_ids: List[ActionIdPair]


@dataclass(frozen=True)
class GraphCloneResult:
    """Everything the application/page/action stream produced, once fully drained."""
    applications: List[Application]
    pages: List[ClonedPageActions]

    @property
    def action_ids(self) -> List[ActionIdPair]:
        return [pair for p in self.pages for pair in p.action_ids]


# ─────────────────────────────────────────────────────────────
# Diagnostics & results
# ─────────────────────────────────────────────────────────────

class ReferenceInconsistency(BaseModel):
    """A layout points at an action id that has no cloned counterpart."""
    page_id: str
    layout_id: Optional[str] = None
    action_id: Optional[str] = None
    variant: Literal["draft", "published"]


class ClonedWorkspaceHandle(BaseModel):
    workspace: Workspace
    applications: int = 0
    pages: int = 0
    actions: int = 0
    datasources: int = 0
    rewritten_pages: int = 0
    inconsistencies: List[ReferenceInconsistency] = Field(default_factory=list)


class CloneOutcome(BaseModel):
    run_id: str = Field(default_factory=lambda: str(uuid4()))
    status: CloneOutcomeStatus
    reason: Optional[str] = None
    handle: Optional[ClonedWorkspaceHandle] = None
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ─────────────────────────────────────────────────────────────
# Requests
# ─────────────────────────────────────────────────────────────

class ExamplesCloneRequest(BaseModel):
    user_id: str


class StartCloneRequest(BaseModel):
    template_workspace_id: str
    user_id: str
