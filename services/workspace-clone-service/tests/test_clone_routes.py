import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_cloner
from app.cloning import CloneStoreError, InvalidTemplateError
from app.config import settings
from app.main import app

from .conftest import TEMPLATE_WS, USER_ID


@pytest.fixture
def client(cloner):
    app.dependency_overrides[get_cloner] = lambda: cloner
    # no context manager: lifespan (Mongo indexes, RabbitMQ) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_ready_reports_template_configuration(client, template, monkeypatch):
    monkeypatch.setattr(settings, "template_workspace_id", "")
    assert client.get("/ready").json()["template_configured"] is False

    template["config"].seed({"name": "template-workspace", "config": {"workspace_id": TEMPLATE_WS}})
    data = client.get("/ready").json()

    assert data["status"] == "ready"
    assert data["template_configured"] is True
    assert data["clone_concurrency"] == 4


def test_clone_explicit_template(client, template):
    resp = client.post("/clones", json={"template_workspace_id": TEMPLATE_WS, "user_id": USER_ID})

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "completed"
    assert data["handle"]["applications"] == 1
    assert data["handle"]["datasources"] == 2
    assert data["handle"]["inconsistencies"][0]["action_id"] == "ghost"


def test_examples_clone_runs_once_per_user(client, template):
    template["config"].seed({"name": "template-workspace", "config": {"workspace_id": TEMPLATE_WS}})

    first = client.post("/clones/examples", json={"user_id": USER_ID})
    second = client.post("/clones/examples", json={"user_id": USER_ID})

    assert first.json()["status"] == "completed"
    assert second.status_code == 200
    assert second.json()["status"] == "skipped"
    assert second.json()["handle"] is None


def test_unknown_user_is_404(client, template):
    resp = client.post("/clones/examples", json={"user_id": "nobody"})
    assert resp.status_code == 404


def test_invalid_template_is_422(client, template, cloner, monkeypatch):
    async def fail(template_workspace_id, user, **kw):
        raise InvalidTemplateError("Datasource 'x' has no id")

    monkeypatch.setattr(cloner, "clone_workspace_for_user", fail)

    resp = client.post("/clones", json={"template_workspace_id": TEMPLATE_WS, "user_id": USER_ID})

    assert resp.status_code == 422


def test_store_failure_is_502(client, template, cloner, monkeypatch):
    async def fail(template_workspace_id, user, **kw):
        raise CloneStoreError("primary stepped down")

    monkeypatch.setattr(cloner, "clone_workspace_for_user", fail)

    resp = client.post("/clones", json={"template_workspace_id": TEMPLATE_WS, "user_id": USER_ID})

    assert resp.status_code == 502


def test_unresolvable_datasource_is_409(client, template):
    template["actions"].docs[0]["datasource"] = {"id": "ds-old"}

    resp = client.post("/clones", json={"template_workspace_id": TEMPLATE_WS, "user_id": USER_ID})

    assert resp.status_code == 409
    assert "ds-old" in resp.json()["detail"]
