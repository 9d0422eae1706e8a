# services/workspace-clone-service/app/clients/http_utils.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from app.config import settings

logger = logging.getLogger("app.clients.http")


# One shared AsyncClient per base_url (connection pooling + timeouts)
_clients: dict[str, httpx.AsyncClient] = {}
_clients_lock = asyncio.Lock()


async def get_http_client(base_url: str) -> httpx.AsyncClient:
    async with _clients_lock:
        client = _clients.get(base_url)
        if client is None or client.is_closed:
            client = httpx.AsyncClient(
                base_url=base_url,
                timeout=settings.http_client_timeout_seconds,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"workspace-cloner/{settings.service_name}",
                },
            )
            _clients[base_url] = client
            logger.info("HTTP client created for %s", base_url)
        return client


async def close_http_clients() -> None:
    async with _clients_lock:
        for client in _clients.values():
            await client.aclose()
        _clients.clear()


class ServiceClientError(RuntimeError):
    def __init__(self, *, service: str, status: int, url: str, body: str) -> None:
        super().__init__(f"{service} HTTP {status}: {url} :: {body[:500]}")
        self.service = service
        self.status = status
        self.url = url
        self.body = body


def raise_for_status(service: str, resp: httpx.Response) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        # keep body for debugging (limited)
        raise ServiceClientError(
            service=service, status=resp.status_code, url=str(resp.request.url), body=resp.text
        ) from e


# Conservative retry for idempotent calls; transport errors only, HTTP errors surface at once
def retryable(fn: Callable) -> Callable:
    return retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=0.2, max=2.0),
        reraise=True,
    )(fn)
