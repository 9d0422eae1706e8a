# services/workspace-clone-service/app/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from app.api.routers import clone_routes, health_routes
from app.clients.http_utils import close_http_clients
from app.config import settings
from app.db.mongodb import close_client as close_mongo_client
from app.db.mongodb import init_indexes
from app.events.rabbit import RabbitBus, get_bus
from app.infra.logging import setup_logging

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    App lifespan:
      - configure logging
      - init Mongo indexes
      - connect event bus (RabbitMQ) when events are enabled
      - graceful shutdown: bus, HTTP clients, Mongo client
    """
    setup_logging(settings.service_name)
    logger.info("%s starting up", settings.service_name)

    # 1) Mongo indexes
    await init_indexes()
    logger.info("Mongo indexes ensured (db=%s)", settings.mongo_db)

    # 2) RabbitMQ
    bus: RabbitBus = get_bus()
    if settings.events_enabled:
        await bus.connect()
        logger.info("RabbitMQ connected (exchange=%s)", settings.rabbitmq_exchange)

    try:
        yield
    finally:
        # a) Event bus
        try:
            await bus.close()
        except Exception:
            logger.warning("Error closing RabbitMQ", exc_info=True)

        # b) HTTP clients (secrets-service)
        try:
            await close_http_clients()
        except Exception:
            logger.warning("Error closing HTTP clients", exc_info=True)

        # c) Mongo client
        try:
            await close_mongo_client()
            logger.info("Mongo client closed")
        except Exception:
            logger.warning("Error closing Mongo client", exc_info=True)

        logger.info("%s shutdown complete", settings.service_name)


app = FastAPI(
    title="Workspace Clone Service",
    description="Clones a template workspace graph into a new workspace for a user",
    version=settings.service_version,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.include_router(health_routes.router)
app.include_router(clone_routes.router)
