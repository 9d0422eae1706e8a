# services/workspace-clone-service/app/secrets/codec.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from app.clients.secrets_service import SecretsServiceClient
from app.config import settings
from app.models import SENSITIVE_AUTH_FIELDS, AuthenticationBlock

logger = logging.getLogger("app.secrets")


def _sensitive_values(auth: AuthenticationBlock) -> Dict[str, str]:
    return {f: getattr(auth, f) for f in SENSITIVE_AUTH_FIELDS if getattr(auth, f)}


class SecretCodec:
    """
    Decrypts/encrypts the sensitive fields of a datasource authentication block.
    Backends: "none" (values stored as-is, only the flag moves) | "http" (secrets-service).
    Returns new blocks; the input is never mutated.
    """

    def __init__(self, *, backend: Optional[str] = None, client: Optional[SecretsServiceClient] = None) -> None:
        self.backend = (backend or settings.secret_backend).lower()
        if self.backend not in ("none", "http"):
            raise ValueError(f"Unsupported secret backend: {self.backend}")
        self._client = client

    @property
    def client(self) -> SecretsServiceClient:
        if self._client is None:
            self._client = SecretsServiceClient()
        return self._client

    async def decrypt_sensitive_fields(self, auth: Optional[AuthenticationBlock]) -> Optional[AuthenticationBlock]:
        if auth is None or not auth.is_encrypted:
            return auth
        values = _sensitive_values(auth)
        if values and self.backend == "http":
            values = await self.client.decrypt(values)
        return auth.model_copy(update={**values, "is_encrypted": False})

    async def encrypt_sensitive_fields(self, auth: Optional[AuthenticationBlock]) -> Optional[AuthenticationBlock]:
        if auth is None or auth.is_encrypted:
            return auth
        values = _sensitive_values(auth)
        if values and self.backend == "http":
            values = await self.client.encrypt(values)
        return auth.model_copy(update={**values, "is_encrypted": True})
