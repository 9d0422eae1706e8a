# services/workspace-clone-service/app/services/template_config_service.py
from __future__ import annotations

import logging
from typing import Optional

from app.config import settings
from app.db.config_repository import ConfigRepository

logger = logging.getLogger("app.services.template_config")

TEMPLATE_WORKSPACE_CONFIG = "template-workspace"


class TemplateConfigService:
    def __init__(self, config: ConfigRepository) -> None:
        self.config = config

    async def get_template_workspace_id(self) -> Optional[str]:
        """
        Stored config first, then the TEMPLATE_WORKSPACE_ID setting.
        None means "no template configured": callers skip cloning.
        """
        stored = await self.config.get_config(TEMPLATE_WORKSPACE_CONFIG) or {}
        template_id = stored.get("workspace_id") or settings.template_workspace_id or None
        if template_id is None:
            logger.error("Missing template workspace id in config.")
        return template_id
