# services/workspace-clone-service/app/cloning/action_stream.py
from __future__ import annotations

import logging
from typing import List

from app.cloning.context import CloneContext
from app.cloning.errors import InvalidTemplateError
from app.cloning.identity import make_pristine
from app.cloning.tasks import gather_all
from app.models import Action, ActionIdPair, ClonedPage

logger = logging.getLogger("app.cloning.actions")


async def clone_action(ctx: CloneContext, action: Action, cloned_page_id: str) -> ActionIdPair:
    source_action_id = action.id
    if source_action_id is None:
        raise InvalidTemplateError(f"Action {action.name!r} in template has no id", entity="action")
    logger.info("Creating clone of action %s (%s)", action.name, source_action_id)

    make_pristine(action)
    action.page_id = cloned_page_id
    action.workspace_id = ctx.target_workspace_id
    action.collection_id = None

    datasource = action.datasource
    if datasource is not None:
        if datasource.id is not None:
            # joins on the shared datasource clone set for this key only
            action.datasource = await ctx.datasources.resolve(datasource.id, action_id=source_action_id)
        else:
            # inline datasource: travels with the action, nothing shared to resolve
            action.datasource = datasource.model_copy(update={"workspace_id": ctx.target_workspace_id})

    async with ctx.write_limit:
        created = await ctx.action_service.create(action)
    return ActionIdPair(source_action_id=source_action_id, cloned_action_id=created.id or "")


async def clone_page_actions(ctx: CloneContext, cloned: ClonedPage) -> List[ActionIdPair]:
    """Clone every action under the source page into the (already written) cloned page."""
    source_actions = await ctx.repos.actions.find_by_page_id(cloned.source_page_id)
    return await gather_all(clone_action(ctx, a, cloned.page.id or "") for a in source_actions)
