# services/workspace-clone-service/app/db/mongodb.py
from __future__ import annotations

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from app.config import settings

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """
    Singleton Motor client for the workspace-clone-service.
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.mongo_uri)
    return _client


def get_db() -> AsyncIOMotorDatabase:
    """
    Default database selected by settings.mongo_db.
    """
    return get_client()[settings.mongo_db]


async def init_indexes() -> None:
    """
    Unique `id` per entity collection plus the owner-scoped read paths the
    cloner walks (datasources/applications by workspace, pages by application,
    actions by page).
    """
    db = get_db()

    for name in ("workspaces", "applications", "pages", "actions", "datasources", "users"):
        await db[name].create_index([("id", ASCENDING)], name="uk_id", unique=True)

    await db.workspaces.create_index([("slug", ASCENDING)], name="ix_slug")
    await db.applications.create_index(
        [("workspace_id", ASCENDING), ("is_public", ASCENDING)],
        name="ix_ws_public",
    )
    await db.datasources.create_index([("workspace_id", ASCENDING)], name="ix_ws")
    await db.pages.create_index([("application_id", ASCENDING)], name="ix_app")
    await db.actions.create_index([("page_id", ASCENDING)], name="ix_page")
    await db.config.create_index([("name", ASCENDING)], name="uk_name", unique=True)


async def close_client() -> None:
    """
    Graceful shutdown hook (called from app lifespan).
    """
    global _client
    if _client is not None:
        _client.close()
        _client = None
