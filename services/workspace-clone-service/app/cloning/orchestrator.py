# services/workspace-clone-service/app/cloning/orchestrator.py
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Optional, Protocol
from uuid import uuid4

from pymongo.errors import PyMongoError

from app.cloning.application_stream import stream_graph
from app.cloning.context import CloneContext
from app.cloning.datasource_clone_set import DatasourceCloneSet
from app.cloning.errors import CloneStoreError
from app.cloning.identity import make_pristine
from app.cloning.reference_rewriter import build_remap_table, rewrite_pages
from app.cloning.tasks import cancel_and_wait, gather_all
from app.config import settings
from app.db.repositories import Repositories
from app.events.schemas import WorkspaceCloneEvent
from app.models import (
    CloneOutcome,
    CloneOutcomeStatus,
    CloneState,
    ClonedWorkspaceHandle,
    GraphCloneResult,
    Page,
    User,
    Workspace,
)
from app.secrets.codec import SecretCodec
from app.services import (
    ActionService,
    ApplicationPageService,
    DatasourceService,
    TemplateConfigService,
    WorkspaceService,
)

logger = logging.getLogger("app.cloning.orchestrator")


class EventBus(Protocol):
    async def publish(self, *, event: str, payload: dict) -> None: ...


_TRANSITIONS: Dict[CloneState, set] = {
    CloneState.NOT_STARTED: {CloneState.TEMPLATE_RESOLVED, CloneState.SKIPPED},
    CloneState.TEMPLATE_RESOLVED: {CloneState.DATASOURCES_IN_FLIGHT},
    CloneState.DATASOURCES_IN_FLIGHT: {CloneState.GRAPH_STREAMING},
    CloneState.GRAPH_STREAMING: {CloneState.REMAP_COMPLETE},
    CloneState.REMAP_COMPLETE: {CloneState.REFERENCES_REWRITTEN},
    CloneState.REFERENCES_REWRITTEN: {CloneState.DATASOURCES_COMPLETE},
    CloneState.DATASOURCES_COMPLETE: {CloneState.DONE},
}
_TERMINAL = {CloneState.DONE, CloneState.SKIPPED, CloneState.FAILED}


class CloneRun:
    """State of one clone run. Transitions are one-way; any live state may fail."""

    def __init__(self, run_id: Optional[str] = None) -> None:
        self.run_id = run_id or str(uuid4())
        self.state = CloneState.NOT_STARTED
        self.history = [CloneState.NOT_STARTED]

    def advance(self, state: CloneState) -> None:
        allowed = _TRANSITIONS.get(self.state, set())
        if state == CloneState.FAILED and self.state not in _TERMINAL:
            allowed = {CloneState.FAILED}
        if state not in allowed:
            raise RuntimeError(f"Illegal clone state transition {self.state.value} -> {state.value}")
        logger.info("[run %s] %s -> %s", self.run_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)


class WorkspaceCloner:
    """
    Clones a template workspace (applications, pages, layouts, actions,
    datasources) into a new workspace owned by a user, keeping layout -> action
    references pointed at the clones.
    """

    def __init__(
        self,
        repos: Repositories,
        *,
        codec: Optional[SecretCodec] = None,
        bus: Optional[EventBus] = None,
        concurrency: Optional[int] = None,
    ) -> None:
        self.repos = repos
        self.workspace_service = WorkspaceService(repos.workspaces)
        self.application_pages = ApplicationPageService(repos.applications, repos.pages)
        self.action_service = ActionService(repos.actions)
        self.codec = codec or SecretCodec()
        self.datasource_service = DatasourceService(repos.datasources, self.codec)
        self.template_config = TemplateConfigService(repos.config)
        self.bus = bus
        self.concurrency = max(concurrency or settings.clone_concurrency, 1)

    # ---------- entry points ---------- #

    async def clone_examples_workspace(self, user: User) -> CloneOutcome:
        """
        Front-door flow: clone the configured template for `user` unless they already
        have an examples workspace. Missing template config is a skip, not an error.
        """
        run = CloneRun()
        if user.examples_workspace_id:
            # already cloned for this user: no reads of the template, no writes
            return self._skip(run, f"User {user.email} already has examples workspace {user.examples_workspace_id}")

        try:
            template_workspace_id = await self.template_config.get_template_workspace_id()
        except PyMongoError as e:
            run.advance(CloneState.FAILED)
            logger.exception("[run %s] Error loading template workspace id config", run.run_id)
            await self._publish_failed(run, None, user, None, e)
            raise CloneStoreError(f"Loading template workspace config failed: {e}") from e
        if not template_workspace_id:
            logger.error(
                "Template workspace ID not found. Skipping creating example workspace for user %s.", user.email
            )
            return self._skip(run, "No template workspace configured")

        return await self.clone_workspace_for_user(template_workspace_id, user, run=run)

    async def clone_workspace_for_user(
        self,
        template_workspace_id: str,
        user: User,
        *,
        run: Optional[CloneRun] = None,
    ) -> CloneOutcome:
        run = run or CloneRun()
        logger.info("[run %s] Cloning workspace %s for %s", run.run_id, template_workspace_id, user.email)
        t0 = time.perf_counter()
        workspace: Optional[Workspace] = None
        try:
            template = await self.repos.workspaces.get(template_workspace_id)
            if template is None:
                logger.error(
                    "Template examples workspace not found. Not creating a clone for user %s.", user.email
                )
                return self._skip(run, f"Template workspace {template_workspace_id} not found")
            run.advance(CloneState.TEMPLATE_RESOLVED)

            make_pristine(template)
            template.user_roles = []
            template.slug = None
            workspace = await self.workspace_service.create_personal(template, user)

            handle = await self.clone_applications(run, template_workspace_id, workspace)

            linked = await self.repos.users.link_examples_workspace(user.id or "", workspace.id or "")
            if linked is None:
                raise CloneStoreError(f"User {user.id} could not be linked to workspace {workspace.id}")
            run.advance(CloneState.DONE)
        except PyMongoError as e:
            run.advance(CloneState.FAILED)
            logger.exception("[run %s] Store failure while cloning workspace", run.run_id)
            await self._publish_failed(run, template_workspace_id, user, workspace, e)
            raise CloneStoreError(str(e)) from e
        except Exception as e:
            run.advance(CloneState.FAILED)
            logger.exception("[run %s] Error cloning examples workspace", run.run_id)
            await self._publish_failed(run, template_workspace_id, user, workspace, e)
            raise

        logger.info(
            "[run %s] Workspace %s cloned into %s in %.3fs (%d apps, %d pages, %d actions, %d datasources, %d inconsistencies)",
            run.run_id, template_workspace_id, workspace.id, time.perf_counter() - t0,
            handle.applications, handle.pages, handle.actions, handle.datasources, len(handle.inconsistencies),
        )
        await self._publish(
            "workspace_clone.completed",
            WorkspaceCloneEvent(
                run_id=run.run_id,
                user_id=user.id,
                template_workspace_id=template_workspace_id,
                workspace_id=workspace.id,
                status="completed",
                counts=_counts(handle),
                inconsistencies=len(handle.inconsistencies),
            ),
        )
        return CloneOutcome(run_id=run.run_id, status=CloneOutcomeStatus.COMPLETED, handle=handle)

    # ---------- the clone itself ---------- #

    async def clone_applications(self, run: CloneRun, source_workspace_id: str, workspace: Workspace) -> ClonedWorkspaceHandle:
        """
        Clone every public application (pages, actions) and every datasource from the
        source workspace into `workspace`.

        The datasource clone set starts first and runs alongside the graph stream;
        layout references are rewritten only after the stream has fully drained, and
        the run is not complete until the datasource clone set is, used or not.
        """
        target_workspace_id = workspace.id or ""
        write_limit = asyncio.Semaphore(self.concurrency)
        datasources = DatasourceCloneSet(
            datasources=self.repos.datasources,
            datasource_service=self.datasource_service,
            codec=self.codec,
            source_workspace_id=source_workspace_id,
            target_workspace_id=target_workspace_id,
            write_limit=write_limit,
        ).start()
        run.advance(CloneState.DATASOURCES_IN_FLIGHT)
        ctx = CloneContext(
            run_id=run.run_id,
            source_workspace_id=source_workspace_id,
            target_workspace_id=target_workspace_id,
            repos=self.repos,
            application_pages=self.application_pages,
            action_service=self.action_service,
            datasources=datasources,
            write_limit=write_limit,
        )

        run.advance(CloneState.GRAPH_STREAMING)
        streaming = asyncio.ensure_future(stream_graph(ctx))
        try:
            graph = await self._drain_graph(streaming, datasources)
            run.advance(CloneState.REMAP_COMPLETE)

            remap = build_remap_table(graph.action_ids)
            rewrite = rewrite_pages((p.page.page for p in graph.pages), remap)
            await gather_all(self._save_page(write_limit, page) for page in rewrite.changed_pages)
            run.advance(CloneState.REFERENCES_REWRITTEN)

            cloned_datasources = await datasources.result()
            run.advance(CloneState.DATASOURCES_COMPLETE)
        except BaseException:
            await cancel_and_wait(streaming)
            await datasources.cancel()
            raise

        return ClonedWorkspaceHandle(
            workspace=workspace,
            applications=len(graph.applications),
            pages=len(graph.pages),
            actions=len(remap),
            datasources=len(cloned_datasources),
            rewritten_pages=len(rewrite.changed_pages),
            inconsistencies=rewrite.inconsistencies,
        )

    @staticmethod
    async def _drain_graph(streaming: "asyncio.Future[GraphCloneResult]", datasources: DatasourceCloneSet) -> GraphCloneResult:
        """
        Wait for the graph stream only. A datasource clone set that fails first
        aborts the wait; one still running is left for the caller to await later.
        """
        pending = {streaming, datasources.task}
        while not streaming.done():
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            if datasources.task in done:
                # raises the clone set's error; a success returns at once
                await datasources.result()
        return streaming.result()

    async def _save_page(self, write_limit: asyncio.Semaphore, page: Page) -> Page:
        async with write_limit:
            return await self.repos.pages.save(page)

    # ---------- outcomes & events ---------- #

    def _skip(self, run: CloneRun, reason: str) -> CloneOutcome:
        run.advance(CloneState.SKIPPED)
        logger.info("[run %s] Clone skipped: %s", run.run_id, reason)
        return CloneOutcome(run_id=run.run_id, status=CloneOutcomeStatus.SKIPPED, reason=reason)

    async def _publish_failed(
        self,
        run: CloneRun,
        template_workspace_id: Optional[str],
        user: User,
        workspace: Optional[Workspace],
        error: BaseException,
    ) -> None:
        await self._publish(
            "workspace_clone.failed",
            WorkspaceCloneEvent(
                run_id=run.run_id,
                user_id=user.id,
                template_workspace_id=template_workspace_id,
                workspace_id=workspace.id if workspace else None,
                status="failed",
                error=f"{type(error).__name__}: {error}",
            ),
        )

    async def _publish(self, event: str, payload: WorkspaceCloneEvent) -> None:
        if self.bus is None:
            return
        try:
            await self.bus.publish(event=event, payload=payload.model_dump(mode="json"))
        except Exception:
            logger.warning("[run %s] Non-fatal: publishing %s failed", payload.run_id, event, exc_info=True)


def _counts(handle: ClonedWorkspaceHandle) -> Dict[str, int]:
    return {
        "applications": handle.applications,
        "pages": handle.pages,
        "actions": handle.actions,
        "datasources": handle.datasources,
        "rewritten_pages": handle.rewritten_pages,
    }
