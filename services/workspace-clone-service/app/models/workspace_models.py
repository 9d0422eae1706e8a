# services/workspace-clone-service/app/models/workspace_models.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────
# Shared document base
# ─────────────────────────────────────────────────────────────

class Policy(BaseModel):
    permission: str
    users: List[str] = Field(default_factory=list)
    groups: List[str] = Field(default_factory=list)


class BaseDocument(BaseModel):
    """
    Fields every stored entity carries. `id` is our own string identity; Mongo's
    `_id` never leaves the repository layer.
    A document whose `id` is None is written as a new document on the next create.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    policies: List[Policy] = Field(default_factory=list)
    deleted: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ─────────────────────────────────────────────────────────────
# Workspace / principal
# ─────────────────────────────────────────────────────────────

class UserRole(BaseModel):
    user_id: str
    username: Optional[str] = None
    role: str = "administrator"


class Workspace(BaseDocument):
    name: str
    slug: Optional[str] = None
    user_roles: List[UserRole] = Field(default_factory=list)


class User(BaseDocument):
    email: str
    name: Optional[str] = None
    examples_workspace_id: Optional[str] = None


# ─────────────────────────────────────────────────────────────
# Applications / pages / layouts
# ─────────────────────────────────────────────────────────────

class ApplicationPage(BaseModel):
    id: str
    is_default: bool = False


class Application(BaseDocument):
    name: str
    workspace_id: str
    is_public: bool = False
    pages: List[ApplicationPage] = Field(default_factory=list)


class ActionReference(BaseModel):
    """
    A bare reference to an action from a layout's on-load groups. Only `id` is
    rewritten on clone; anything else the editor stored rides along.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None


class Layout(BaseModel):
    id: Optional[str] = None
    dsl: Dict[str, Any] = Field(default_factory=dict)
    layout_on_load_actions: Optional[List[List[ActionReference]]] = None
    published_layout_on_load_actions: Optional[List[List[ActionReference]]] = None


class Page(BaseDocument):
    name: str
    application_id: str
    layouts: List[Layout] = Field(default_factory=list)


# ─────────────────────────────────────────────────────────────
# Datasources / actions
# ─────────────────────────────────────────────────────────────

SENSITIVE_AUTH_FIELDS = ("password", "secret_key", "client_secret", "bearer_token")


class AuthenticationBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    auth_type: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    secret_key: Optional[str] = None
    client_secret: Optional[str] = None
    bearer_token: Optional[str] = None
    is_encrypted: bool = False


class DatasourceConfiguration(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None
    authentication: Optional[AuthenticationBlock] = None
    properties: List[Dict[str, Any]] = Field(default_factory=list)


class Datasource(BaseDocument):
    name: Optional[str] = None
    workspace_id: Optional[str] = None
    plugin_id: Optional[str] = None
    datasource_configuration: Optional[DatasourceConfiguration] = None


class Action(BaseDocument):
    name: str
    page_id: str
    workspace_id: Optional[str] = None
    collection_id: Optional[str] = None
    # Either a reference to a shared datasource (has `id`) or an inline one (no `id`).
    datasource: Optional[Datasource] = None
    action_configuration: Dict[str, Any] = Field(default_factory=dict)
