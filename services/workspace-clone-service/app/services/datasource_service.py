# services/workspace-clone-service/app/services/datasource_service.py
from __future__ import annotations

from app.db.datasource_repository import DatasourceRepository
from app.models import Datasource
from app.secrets.codec import SecretCodec


class DatasourceService:
    def __init__(self, datasources: DatasourceRepository, codec: SecretCodec) -> None:
        self.datasources = datasources
        self.codec = codec

    async def create(self, datasource: Datasource) -> Datasource:
        """Sensitive authentication fields are always stored encrypted."""
        cfg = datasource.datasource_configuration
        if cfg is not None and cfg.authentication is not None:
            encrypted = await self.codec.encrypt_sensitive_fields(cfg.authentication)
            datasource = datasource.model_copy(
                update={"datasource_configuration": cfg.model_copy(update={"authentication": encrypted})}
            )
        return await self.datasources.create(datasource)
