"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from siteapi.config import get_settings
from siteapi.db import DbClient, InMemoryDbClient, SqlDbClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so the connection pool is shared across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory database client")
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(
            settings.database_url,
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            create_tables=settings.create_tables,
        )
    return _db_client
