# services/workspace-clone-service/app/clients/secrets_service.py
from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from app.clients.http_utils import get_http_client, raise_for_status, retryable
from app.config import settings

logger = logging.getLogger("app.clients.secrets")


class SecretsServiceClient:
    """
    Thin async client for the secrets service that owns the datasource
    encryption keys. Both calls are idempotent, so both are retried.

      POST /secrets/decrypt  {"values": {field: ciphertext}} -> {"values": {field: plaintext}}
      POST /secrets/encrypt  {"values": {field: plaintext}}  -> {"values": {field: ciphertext}}
    """

    def __init__(self, base_url: Optional[str] = None, *, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url or settings.secrets_svc_base_url
        self.service_name = "secrets-service"
        self._http_client = http_client

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client(self.base_url)

    @retryable
    async def _transform(self, op: str, values: Dict[str, str]) -> Dict[str, str]:
        client = await self._client()
        resp = await client.post(f"/secrets/{op}", json={"values": values})
        raise_for_status(self.service_name, resp)
        return dict(resp.json().get("values") or {})

    async def decrypt(self, values: Dict[str, str]) -> Dict[str, str]:
        return await self._transform("decrypt", values)

    async def encrypt(self, values: Dict[str, str]) -> Dict[str, str]:
        return await self._transform("encrypt", values)
