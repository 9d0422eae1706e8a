import copy
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

os.environ.setdefault("SECRET_BACKEND", "none")
os.environ.setdefault("EVENTS_ENABLED", "0")

import pytest
from pymongo import ReturnDocument

from app.cloning import WorkspaceCloner
from app.db.repositories import Repositories
from app.secrets.codec import SecretCodec

DB_NAME = "clone_test"


# ─────────────────────────────────────────────────────────────
# In-memory stand-in for the slice of the Motor collection API the
# repositories use. Documents are deep-copied in and out like a real store.
# ─────────────────────────────────────────────────────────────

class _Cursor:
    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = docs

    def __aiter__(self):
        self._it = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._it)
        except StopIteration:
            raise StopAsyncIteration


def _project(doc: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    out = copy.deepcopy(doc)
    if projection and projection.get("_id") == 0:
        out.pop("_id", None)
    return out


def _matches(doc: Dict[str, Any], filt: Dict[str, Any]) -> Optional[Dict[str, int]]:
    """Returns positional matches ({array_field: index}) when `doc` matches, else None."""
    positions: Dict[str, int] = {}
    for key, expected in filt.items():
        if "." in key:
            field, sub = key.split(".", 1)
            items = doc.get(field) or []
            idx = next((i for i, it in enumerate(items) if it.get(sub) == expected), None)
            if idx is None:
                return None
            positions[field] = idx
        elif isinstance(expected, dict) and "$ne" in expected:
            if doc.get(key) == expected["$ne"]:
                return None
        elif doc.get(key) != expected:
            return None
    return positions


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.writes = 0
        self.fail_writes: Optional[Exception] = None
        self._next_oid = 0

    # test helpers
    def seed(self, *docs: Dict[str, Any]) -> None:
        for d in docs:
            self.docs.append(copy.deepcopy(d))

    def _write(self) -> None:
        if self.fail_writes is not None:
            raise self.fail_writes
        self.writes += 1

    # reads
    def find(self, filt: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> _Cursor:
        return _Cursor([_project(d, projection) for d in self.docs if _matches(d, filt) is not None])

    async def find_one(self, filt: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        for d in self.docs:
            if _matches(d, filt) is not None:
                return _project(d, projection)
        return None

    async def count_documents(self, filt: Dict[str, Any]) -> int:
        return sum(1 for d in self.docs if _matches(d, filt) is not None)

    # writes
    async def insert_one(self, doc: Dict[str, Any]):
        self._write()
        self._next_oid += 1
        doc["_id"] = f"{self.name}-{self._next_oid}"
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def replace_one(self, filt: Dict[str, Any], doc: Dict[str, Any], upsert: bool = False):
        self._write()
        for i, d in enumerate(self.docs):
            if _matches(d, filt) is not None:
                self.docs[i] = {**copy.deepcopy(doc), "_id": d.get("_id")}
                return SimpleNamespace(matched_count=1, modified_count=1)
        if upsert:
            self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(matched_count=0, modified_count=0)

    def _apply(self, doc: Dict[str, Any], update: Dict[str, Any], positions: Dict[str, int]) -> None:
        for key, value in (update.get("$set") or {}).items():
            parts = key.split(".")
            if len(parts) == 3 and parts[1] == "$[]":
                for item in doc.get(parts[0]) or []:
                    item[parts[2]] = value
            elif len(parts) == 3 and parts[1] == "$":
                doc[parts[0]][positions[parts[0]]][parts[2]] = value
            else:
                doc[key] = copy.deepcopy(value)
        for key, value in (update.get("$push") or {}).items():
            doc.setdefault(key, []).append(copy.deepcopy(value))

    async def update_one(self, filt: Dict[str, Any], update: Dict[str, Any]):
        self._write()
        for d in self.docs:
            positions = _matches(d, filt)
            if positions is not None:
                self._apply(d, update, positions)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def find_one_and_update(
        self,
        filt: Dict[str, Any],
        update: Dict[str, Any],
        projection: Optional[Dict[str, Any]] = None,
        return_document: Any = ReturnDocument.BEFORE,
    ):
        self._write()
        for d in self.docs:
            positions = _matches(d, filt)
            if positions is not None:
                before = _project(d, projection)
                self._apply(d, update, positions)
                return _project(d, projection) if return_document == ReturnDocument.AFTER else before
        return None

    async def create_index(self, *args, **kwargs) -> str:
        return "ix"


class FakeDatabase:
    def __init__(self) -> None:
        self._cols: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._cols:
            self._cols[name] = FakeCollection(name)
        return self._cols[name]

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def total_writes(self) -> int:
        return sum(c.writes for c in self._cols.values())


class FakeMongoClient:
    def __init__(self) -> None:
        self._dbs: Dict[str, FakeDatabase] = {}

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self._dbs:
            self._dbs[name] = FakeDatabase()
        return self._dbs[name]


class RecordingBus:
    def __init__(self) -> None:
        self.events: List[tuple] = []

    async def publish(self, *, event: str, payload: dict) -> None:
        self.events.append((event, payload))


# ─────────────────────────────────────────────────────────────
# Template graph
# ─────────────────────────────────────────────────────────────

TEMPLATE_WS = "tpl-ws"
USER_ID = "user-1"


def seed_template(db: FakeDatabase) -> None:
    """
    One public application with two pages (page-1 default, page-2 not).
    page-1: act-1 -> ds-1; its published layout also lists a dangling "ghost" id.
    page-2: act-2 -> ds-1, act-3 with an inline datasource.
    ds-2 is never used by an action; ds-old is soft-deleted.
    """
    policies = [{"permission": "read:workspaces", "users": ["template-admin@example.com"], "groups": []}]
    db["workspaces"].seed(
        {
            "id": TEMPLATE_WS,
            "name": "Examples",
            "slug": "examples",
            "user_roles": [{"user_id": "admin", "username": "template-admin@example.com", "role": "administrator"}],
            "policies": policies,
        }
    )
    db["datasources"].seed(
        {
            "id": "ds-1",
            "name": "Movies DB",
            "workspace_id": TEMPLATE_WS,
            "policies": policies,
            "datasource_configuration": {
                "url": "postgres://movies",
                "authentication": {"auth_type": "db", "username": "reader", "password": "s3cret", "is_encrypted": True},
            },
        },
        {"id": "ds-2", "name": "Unused API", "workspace_id": TEMPLATE_WS},
        {"id": "ds-old", "name": "Retired", "workspace_id": TEMPLATE_WS, "deleted": True},
    )
    db["applications"].seed(
        {
            "id": "app-1",
            "name": "Movie Browser",
            "workspace_id": TEMPLATE_WS,
            "is_public": True,
            "policies": policies,
            "pages": [{"id": "page-1", "is_default": True}, {"id": "page-2", "is_default": False}],
        },
        {"id": "app-private", "name": "Draft", "workspace_id": TEMPLATE_WS, "is_public": False, "pages": []},
        {"id": "app-deleted", "name": "Gone", "workspace_id": TEMPLATE_WS, "is_public": True, "deleted": True, "pages": []},
    )
    db["pages"].seed(
        {
            "id": "page-1",
            "name": "Home",
            "application_id": "app-1",
            "policies": policies,
            "layouts": [
                {
                    "id": "layout-1",
                    "dsl": {"widgetName": "MainContainer"},
                    "layout_on_load_actions": [[{"id": "act-1", "name": "fetchMovies", "timeout_in_millisecond": 10000}]],
                    "published_layout_on_load_actions": [[{"id": "act-1", "name": "fetchMovies"}, {"id": "ghost", "name": "removed"}]],
                }
            ],
        },
        {
            "id": "page-2",
            "name": "Details",
            "application_id": "app-1",
            "layouts": [
                {
                    "id": "layout-2",
                    "layout_on_load_actions": [[{"id": "act-2", "name": "fetchDetails"}], [{"id": "act-3", "name": "fetchPoster"}]],
                    "published_layout_on_load_actions": None,
                }
            ],
        },
    )
    db["actions"].seed(
        {
            "id": "act-1",
            "name": "fetchMovies",
            "page_id": "page-1",
            "workspace_id": TEMPLATE_WS,
            "collection_id": "col-1",
            "policies": policies,
            "datasource": {"id": "ds-1", "name": "Movies DB"},
        },
        {"id": "act-2", "name": "fetchDetails", "page_id": "page-2", "workspace_id": TEMPLATE_WS, "datasource": {"id": "ds-1"}},
        {
            "id": "act-3",
            "name": "fetchPoster",
            "page_id": "page-2",
            "workspace_id": TEMPLATE_WS,
            "datasource": {"name": "posters", "workspace_id": TEMPLATE_WS, "datasource_configuration": {"url": "https://posters"}},
        },
    )
    db["users"].seed({"id": USER_ID, "email": "new@example.com", "name": "New User"})


@pytest.fixture
def mongo() -> FakeMongoClient:
    return FakeMongoClient()


@pytest.fixture
def db(mongo) -> FakeDatabase:
    return mongo[DB_NAME]


@pytest.fixture
def repos(mongo) -> Repositories:
    return Repositories.from_client(mongo, DB_NAME)


@pytest.fixture
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def cloner(repos, bus) -> WorkspaceCloner:
    return WorkspaceCloner(repos, codec=SecretCodec(backend="none"), bus=bus, concurrency=4)


@pytest.fixture
def template(db) -> FakeDatabase:
    seed_template(db)
    return db
