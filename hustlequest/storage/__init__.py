"""Storage package: the contract, both backends, and backend selection."""

from __future__ import annotations

import logging
from datetime import datetime

from ..settings import Settings
from .base import Clock, Storage, UserLocks
from .database import DatabaseStorage
from .memory import MemoryStorage

logger = logging.getLogger(__name__)

__all__ = [
    "Clock",
    "Storage",
    "UserLocks",
    "DatabaseStorage",
    "MemoryStorage",
    "create_storage",
]


def create_storage(settings: Settings, clock: Clock = datetime.now) -> Storage:
    """Build the backend named by *settings*.  Call once per process."""
    if settings.storage_backend == "database":
        from ..database.db import configure_engine, init_db

        configure_engine(settings.database_url)
        init_db()
        logger.info("Using database storage")
        return DatabaseStorage(clock)

    logger.info("Using in-memory storage")
    return MemoryStorage(clock)
