"""Market registry service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.errors import InsufficientPermissions, MarketExists
from prophet.models import Bet, Market, User
from prophet.schemas import MarketCreate
from prophet.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class MarketService:
    """
    Creates and lists markets. Markets group bets by topic.
    """

    async def create_market(
        self,
        db: AsyncSession,
        user: User,
        request: MarketCreate,
        now: Optional[datetime] = None,
    ) -> Market:
        """Create a market. Restricted to admins."""
        if not user.is_admin:
            raise InsufficientPermissions("Insufficient permissions to create markets")

        existing = await db.execute(select(Market.id).where(Market.name == request.name))
        if existing.scalar_one_or_none() is not None:
            raise MarketExists()

        now = now or utc_now()
        market = Market(
            name=request.name,
            description=request.description,
            category=request.category,
            type=request.type.value,
            is_active=True,
            created_by=user.id,
            created_at=now,
            updated_at=now,
        )
        db.add(market)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise MarketExists()

        logger.info(f"Created market {market.name!r} ({market.category})")
        return market

    async def get_market(self, db: AsyncSession, market_id: UUID) -> Optional[Market]:
        result = await db.execute(select(Market).where(Market.id == market_id))
        return result.scalar_one_or_none()

    async def list_markets(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        ascending: bool = False,
    ) -> tuple[list[tuple[Market, int, Decimal]], int]:
        """
        List active markets with their bet count and combined pool.

        Returns ([(market, total_bets, total_pool), ...], total_count).
        """
        filters = [Market.is_active.is_(True)]
        if category:
            filters.append(Market.category == category)
        if search:
            pattern = f"%{search}%"
            filters.append(or_(Market.name.ilike(pattern), Market.description.ilike(pattern)))

        total = (
            await db.execute(select(func.count(Market.id)).where(*filters))
        ).scalar_one()

        sort_column = Market.name if sort == "name" else Market.created_at
        order = sort_column.asc() if ascending else sort_column.desc()

        query = (
            select(
                Market,
                func.count(Bet.id),
                func.coalesce(func.sum(Bet.total_pool), 0),
            )
            .outerjoin(Bet, Bet.market_id == Market.id)
            .where(*filters)
            .group_by(Market.id)
            .order_by(order, Market.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await db.execute(query)).all()

        return [
            (market, bet_count, Decimal(pool).quantize(Decimal("0.01")))
            for market, bet_count, pool in rows
        ], total


# Singleton instance
market_service = MarketService()
