# services/workspace-clone-service/app/services/action_service.py
from __future__ import annotations

from app.db.action_repository import ActionRepository
from app.models import Action


class ActionService:
    def __init__(self, actions: ActionRepository) -> None:
        self.actions = actions

    async def create(self, action: Action) -> Action:
        if not action.page_id:
            raise ValueError(f"Action {action.name!r} has no page")
        return await self.actions.create(action)
