"""FastAPI database dependency."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from prophet.database.session import get_db_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request.

    Services commit their own work; anything left uncommitted when a
    request fails is rolled back by ``get_db_session``.
    """
    async with get_db_session() as session:
        yield session
