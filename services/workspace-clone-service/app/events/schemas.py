from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Optional
from pydantic import BaseModel, Field


class WorkspaceCloneEvent(BaseModel):
    """
    Payload for workspace_clone.completed / workspace_clone.failed.
    """
    run_id: str
    user_id: Optional[str] = None
    template_workspace_id: Optional[str] = None
    workspace_id: Optional[str] = None
    status: str = Field(..., description="completed|failed")
    counts: Dict[str, int] = Field(default_factory=dict)
    inconsistencies: int = 0
    error: Optional[str] = None
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
