# services/workspace-clone-service/app/services/workspace_service.py
from __future__ import annotations

import logging
import re

from app.db.workspace_repository import WorkspaceRepository
from app.models import Policy, User, UserRole, Workspace

logger = logging.getLogger("app.services.workspace")

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")

OWNER_PERMISSIONS = ("manage:workspaces", "read:workspaces", "manage:applications", "read:applications")


def slugify(name: str) -> str:
    slug = _SLUG_STRIP.sub("-", (name or "").lower()).strip("-")
    return slug or "workspace"


class WorkspaceService:
    def __init__(self, workspaces: WorkspaceRepository) -> None:
        self.workspaces = workspaces

    async def _unique_slug(self, name: str) -> str:
        base = slugify(name)
        slug, n = base, 1
        while await self.workspaces.slug_exists(slug):
            n += 1
            slug = f"{base}-{n}"
        return slug

    async def create_personal(self, workspace: Workspace, user: User) -> Workspace:
        """
        Create `workspace` as a new workspace owned by `user`: fresh slug, the user
        bound as administrator, owner policies granted to the user only.
        """
        workspace.slug = await self._unique_slug(workspace.name)
        workspace.user_roles = [UserRole(user_id=user.id or "", username=user.email, role="administrator")]
        workspace.policies = [Policy(permission=p, users=[user.email]) for p in OWNER_PERMISSIONS]
        created = await self.workspaces.create(workspace)
        logger.info("Workspace %s (%s) created for %s", created.id, created.slug, user.email)
        return created
