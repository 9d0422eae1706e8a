# services/workspace-clone-service/app/infra/logging.py
from __future__ import annotations
import logging
import os

# Third-party loggers that drown out the per-entity clone lines at INFO.
_NOISY = ("aio_pika", "aiormq", "httpx", "httpcore", "pymongo", "uvicorn.access")


def _level(name: str, default: str = "INFO") -> int:
    value = logging.getLevelName(os.getenv(name, default).upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(service_name: str = "workspace-clone-service") -> None:
    """
    One pipe-delimited format for every `app.*` logger.
    LOG_LEVEL sets the root level; CLONE_LOG_LEVEL can turn `app.cloning` up
    (DEBUG shows each datasource/action id pair) without flooding the rest.
    """
    logging.basicConfig(
        level=_level("LOG_LEVEL"),
        format=f"%(asctime)s | %(levelname)s | %(name)s | svc={service_name} | %(message)s",
    )
    logging.getLogger("app.cloning").setLevel(_level("CLONE_LOG_LEVEL", os.getenv("LOG_LEVEL", "INFO")))
    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)
