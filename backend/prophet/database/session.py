"""
Database session context managers.
Provides reusable database session management for non-FastAPI contexts.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from prophet.config import get_settings

# Async engine and session factory
_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker] = None


def configure_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """
    (Re)build the async engine and session factory.

    SQLite gets a NullPool so each session opens its own connection on
    whichever event loop is running.
    """
    global _async_engine, _async_session_factory

    url = database_url or get_settings().database_url
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo, poolclass=NullPool)
    else:
        engine = create_async_engine(
            url,
            echo=echo,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    _async_engine = engine
    _async_session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    return engine


def _get_async_engine() -> AsyncEngine:
    """Get or create async engine."""
    if _async_engine is None:
        settings = get_settings()
        configure_engine(settings.database_url, echo=settings.database_echo)
    return _async_engine


def _get_async_session_factory() -> async_sessionmaker:
    """Get or create async session factory."""
    if _async_session_factory is None:
        _get_async_engine()
    return _async_session_factory


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_factory = None


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database sessions in jobs and the CLI.

    Usage:
        async with get_db_session() as db:
            result = await db.execute(select(Bet))
            await db.commit()

    Yields:
        AsyncSession: SQLAlchemy async database session
    """
    factory = _get_async_session_factory()
    session = factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
