# services/workspace-clone-service/app/cloning/datasource_clone_set.py
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

from app.cloning.errors import DatasourceResolutionError, InvalidTemplateError
from app.cloning.identity import make_pristine
from app.cloning.tasks import cancel_and_wait, gather_all
from app.db.datasource_repository import DatasourceRepository
from app.models import Datasource
from app.secrets.codec import SecretCodec
from app.services.datasource_service import DatasourceService

logger = logging.getLogger("app.cloning.datasources")


class DatasourceCloneSet:
    """
    Clones every non-deleted datasource of the source workspace into the target
    workspace, exactly once per clone run.

    The work runs as a single task started by start(); every consumer awaits that
    same task through result()/resolve(), so all of them observe one mapping of
    source datasource id -> cloned datasource. One instance belongs to one run and
    is dropped with it.
    """

    def __init__(
        self,
        *,
        datasources: DatasourceRepository,
        datasource_service: DatasourceService,
        codec: SecretCodec,
        source_workspace_id: str,
        target_workspace_id: str,
        write_limit: asyncio.Semaphore,
    ) -> None:
        self.datasources = datasources
        self.datasource_service = datasource_service
        self.codec = codec
        self.source_workspace_id = source_workspace_id
        self.target_workspace_id = target_workspace_id
        self._write_limit = write_limit
        self._task: Optional[asyncio.Task] = None

    # ---------- lifecycle ---------- #

    def start(self) -> "DatasourceCloneSet":
        if self._task is None:
            self._task = asyncio.ensure_future(self._clone_all())
        return self

    @property
    def task(self) -> asyncio.Task:
        self.start()
        assert self._task is not None
        return self._task

    async def result(self) -> Dict[str, Datasource]:
        # shield: a cancelled consumer must not cancel the shared work
        return await asyncio.shield(self.task)

    async def resolve(self, source_datasource_id: str, *, action_id: Optional[str] = None) -> Datasource:
        mapping = await self.result()
        cloned = mapping.get(source_datasource_id)
        if cloned is None:
            raise DatasourceResolutionError(action_id=action_id, datasource_id=source_datasource_id)
        return cloned

    async def cancel(self) -> None:
        if self._task is not None:
            await cancel_and_wait(self._task)

    # ---------- work ---------- #

    async def _clone_all(self) -> Dict[str, Datasource]:
        sources = await self.datasources.find_by_workspace_id(self.source_workspace_id)
        logger.info(
            "Cloning %d datasources %s -> %s", len(sources), self.source_workspace_id, self.target_workspace_id
        )
        pairs = await gather_all(self._clone_one(ds) for ds in sources)
        return dict(pairs)

    async def _clone_one(self, datasource: Datasource) -> Tuple[str, Datasource]:
        template_datasource_id = datasource.id
        if template_datasource_id is None:
            raise InvalidTemplateError(
                f"Datasource {datasource.name!r} in template workspace {self.source_workspace_id} has no id"
            )

        make_pristine(datasource)
        datasource.workspace_id = self.target_workspace_id
        cfg = datasource.datasource_configuration
        if cfg is not None and cfg.authentication is not None:
            decrypted = await self.codec.decrypt_sensitive_fields(cfg.authentication)
            datasource.datasource_configuration = cfg.model_copy(update={"authentication": decrypted})

        async with self._write_limit:
            cloned = await self.datasource_service.create(datasource)
        logger.debug("Datasource %s cloned as %s", template_datasource_id, cloned.id)
        return template_datasource_id, cloned
