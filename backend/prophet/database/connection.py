"""
Database lifecycle and health check utilities.

This module provides:
- Schema creation for development and tests
- Engine shutdown
- Health check utilities
"""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from prophet.config import get_settings
from prophet.database.base import Base
from prophet.database.session import _get_async_engine, dispose_engine

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """
    Create all tables that do not exist yet.
    Production schemas are expected to be migrated out of band.
    """
    # Importing models registers every table on Base.metadata
    import prophet.models  # noqa: F401

    engine = _get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def close_db() -> None:
    """
    Dispose of the engine and its connection pool.
    """
    await dispose_engine()


async def check_db_connection() -> bool:
    """
    Check if the database connection is healthy.
    """
    try:
        engine = _get_async_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return False


def get_db_info() -> dict:
    """
    Get database connection information with credentials hidden.
    """
    settings = get_settings()
    return {
        "url": _sanitize_database_url(settings.database_url),
        "environment": settings.environment,
    }


def _sanitize_database_url(url: str) -> str:
    """
    Hide password in database URL for safe logging.
    """
    if "@" not in url or "://" not in url:
        return url

    protocol, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    return url
