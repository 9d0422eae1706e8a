# services/workspace-clone-service/app/db/config_repository.py
from __future__ import annotations

from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

COLLECTION_NAME = "config"


class ConfigRepository:
    """
    DAL for the 'config' collection: one document per named setting,
    shaped as {"name": ..., "config": {...}}.
    """

    def __init__(self, client: AsyncIOMotorClient, db_name: str) -> None:
        self._col: AsyncIOMotorCollection = client[db_name][COLLECTION_NAME]

    async def get_config(self, name: str) -> Optional[Dict[str, Any]]:
        doc = await self._col.find_one({"name": name}, {"_id": 0})
        return doc.get("config") if doc else None
