# services/workspace-clone-service/app/events/rabbit.py
from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import aio_pika
from aio_pika import ExchangeType, Message

from app.config import settings

logger = logging.getLogger("app.events")

SERVICE = "workspace-clone"


def rk(org: str, service: str, event: str, version: str = "v1") -> str:
    """<org>.<service>.<event>.<version>, e.g. platform.workspace-clone.workspace_clone.completed.v1"""
    return f"{org}.{service}.{event}.{version}"


def clone_headers(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Routing-independent headers consumers filter on without parsing the body."""
    h: Dict[str, Any] = {"x-emitter": SERVICE, "x-at": datetime.now(timezone.utc).isoformat()}
    if payload.get("run_id"):
        h["x-run-id"] = payload["run_id"]
    if payload.get("workspace_id"):
        h["x-workspace-id"] = payload["workspace_id"]
    if payload.get("user_id"):
        h["x-user-id"] = payload["user_id"]
    return h


class RabbitBus:
    """
    Publishes workspace clone lifecycle events (completed / failed) to a topic
    exchange. Connects lazily on first publish when the lifespan hook has not.
    """

    def __init__(self, *, uri: Optional[str] = None, exchange: Optional[str] = None) -> None:
        self.uri = uri or settings.rabbitmq_uri
        self.exchange_name = exchange or settings.rabbitmq_exchange
        self._conn: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self._ex: Optional[aio_pika.abc.AbstractExchange] = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._ex is not None and self._conn is not None and not self._conn.is_closed

    async def connect(self) -> "RabbitBus":
        async with self._lock:
            if self.connected:
                return self
            logger.info("Rabbit: connecting to exchange %s", self.exchange_name)
            self._conn = await aio_pika.connect_robust(self.uri)
            channel = await self._conn.channel(publisher_confirms=False)
            self._ex = await channel.declare_exchange(self.exchange_name, ExchangeType.TOPIC, durable=True)
        return self

    async def close(self) -> None:
        if self._conn and not self._conn.is_closed:
            await self._conn.close()
            logger.info("Rabbit: connection closed")
        self._conn = None
        self._ex = None

    async def publish(
        self,
        *,
        event: str,
        payload: Dict[str, Any],
        version: str = "v1",
        org: Optional[str] = None,
    ) -> None:
        if not self.connected:
            await self.connect()
        assert self._ex is not None

        routing_key = rk(org or settings.events_org, SERVICE, event, version)
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8")
        await self._ex.publish(
            Message(
                body=body,
                delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                content_type="application/json",
                headers=clone_headers(payload),
            ),
            routing_key=routing_key,
        )
        logger.info("Rabbit: published %s (%d bytes)", routing_key, len(body))


_bus: Optional[RabbitBus] = None


def get_bus() -> RabbitBus:
    global _bus
    if _bus is None:
        _bus = RabbitBus()
    return _bus
