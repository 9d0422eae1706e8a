# services/workspace-clone-service/app/cloning/application_stream.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from app.cloning.action_stream import clone_page_actions
from app.cloning.context import CloneContext
from app.cloning.identity import make_pristine, regenerate_layout_ids
from app.cloning.tasks import gather_all
from app.models import (
    Application,
    ClonedPage,
    ClonedPageActions,
    GraphCloneResult,
    PageCandidate,
)

logger = logging.getLogger("app.cloning.applications")


def default_page_id(application: Application) -> Optional[str]:
    """Source-declared default page, or None when no page reference is flagged."""
    return next((p.id for p in application.pages if p.is_default), None)


async def enumerate_page_candidates(ctx: CloneContext, application: Application) -> Tuple[Application, List[PageCandidate]]:
    """
    Clone the application shell into the target workspace and pair each page of the
    *source* application with its default flag, re-parented to the shell.
    """
    template_application_id = application.id or ""
    default_id = default_page_id(application)
    if default_id is None:
        logger.warning("Application %s has no default page; its clone will have none", template_application_id)

    application.workspace_id = ctx.target_workspace_id
    async with ctx.write_limit:
        shell = await ctx.application_pages.clone_example_application(application)

    source_pages = await ctx.repos.pages.find_by_application_id(template_application_id)
    candidates = []
    for page in source_pages:
        logger.info("Preparing page for cloning %s %s", page.name, page.id)
        candidates.append(
            PageCandidate(
                page=page.model_copy(update={"application_id": shell.id}),
                source_page_id=page.id or "",
                is_default=default_id is not None and page.id == default_id,
            )
        )
    return shell, candidates


async def persist_page(ctx: CloneContext, candidate: PageCandidate) -> ClonedPage:
    page = make_pristine(candidate.page)
    regenerate_layout_ids(page)
    async with ctx.write_limit:
        saved = await ctx.application_pages.create_page(page)
        if candidate.is_default:
            await ctx.application_pages.make_page_default(saved)
    return ClonedPage(source_page_id=candidate.source_page_id, page=saved)


async def clone_page(ctx: CloneContext, candidate: PageCandidate) -> ClonedPageActions:
    # page first, then its actions
    cloned = await persist_page(ctx, candidate)
    action_ids = await clone_page_actions(ctx, cloned)
    return ClonedPageActions(page=cloned, action_ids=action_ids)


async def clone_application(ctx: CloneContext, application: Application) -> Tuple[Application, List[ClonedPageActions]]:
    shell, candidates = await enumerate_page_candidates(ctx, application)
    pages = await gather_all(clone_page(ctx, c) for c in candidates)
    return shell, pages


async def stream_graph(ctx: CloneContext) -> GraphCloneResult:
    """
    Applications -> pages -> actions for every public, non-deleted application of
    the source workspace. Sibling entities run concurrently; the returned result is
    complete only once every action of every page has been written.
    """
    applications = await ctx.repos.applications.find_public_by_workspace_id(ctx.source_workspace_id)
    logger.info("[run %s] Cloning %d applications", ctx.run_id, len(applications))
    per_app = await gather_all(clone_application(ctx, app) for app in applications)
    return GraphCloneResult(
        applications=[shell for shell, _ in per_app],
        pages=[page for _, pages in per_app for page in pages],
    )
