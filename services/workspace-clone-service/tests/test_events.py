import json
from types import SimpleNamespace

import aio_pika
import pytest

from app.config import settings
from app.events.rabbit import RabbitBus, clone_headers, rk
from app.events.schemas import WorkspaceCloneEvent


def test_routing_key_shape():
    assert rk("platform", "workspace-clone", "workspace_clone.completed") == (
        "platform.workspace-clone.workspace_clone.completed.v1"
    )


def test_headers_carry_run_and_workspace():
    payload = WorkspaceCloneEvent(
        run_id="run-1", user_id="user-1", template_workspace_id="tpl-ws", workspace_id="ws-2", status="completed"
    ).model_dump(mode="json")

    headers = clone_headers(payload)

    assert headers["x-run-id"] == "run-1"
    assert headers["x-workspace-id"] == "ws-2"
    assert headers["x-user-id"] == "user-1"
    assert headers["x-emitter"] == "workspace-clone"


def test_failed_event_without_workspace_omits_header():
    payload = WorkspaceCloneEvent(
        run_id="run-1", template_workspace_id="tpl-ws", status="failed", error="AutoReconnect: down"
    ).model_dump(mode="json")

    assert "x-workspace-id" not in clone_headers(payload)
    assert payload["at"]


class _RecordingExchange:
    def __init__(self):
        self.published = []

    async def publish(self, message, routing_key):
        self.published.append((routing_key, message))


def _connected_bus():
    bus = RabbitBus(uri="amqp://unused", exchange="workspace.events")
    bus._conn = SimpleNamespace(is_closed=False)
    bus._ex = _RecordingExchange()
    return bus


@pytest.mark.asyncio
async def test_publish_sends_persistent_json_with_headers(monkeypatch):
    monkeypatch.setattr(settings, "events_org", "acme")
    bus = _connected_bus()
    payload = WorkspaceCloneEvent(
        run_id="run-1", template_workspace_id="tpl-ws", workspace_id="ws-2", status="completed", counts={"pages": 2}
    ).model_dump(mode="json")

    await bus.publish(event="workspace_clone.completed", payload=payload)

    [(routing_key, message)] = bus._ex.published
    assert routing_key == "acme.workspace-clone.workspace_clone.completed.v1"
    assert json.loads(message.body) == payload
    assert message.content_type == "application/json"
    assert message.delivery_mode == aio_pika.DeliveryMode.PERSISTENT
    assert message.headers["x-run-id"] == "run-1"


@pytest.mark.asyncio
async def test_publish_connects_lazily(monkeypatch):
    bus = RabbitBus(uri="amqp://unused")
    connected = []

    async def fake_connect():
        connected.append(True)
        bus._conn = SimpleNamespace(is_closed=False)
        bus._ex = _RecordingExchange()
        return bus

    monkeypatch.setattr(bus, "connect", fake_connect)

    await bus.publish(event="workspace_clone.failed", payload={"run_id": "run-2"})

    assert connected == [True]
    assert bus._ex.published[0][0].endswith(".workspace_clone.failed.v1")
