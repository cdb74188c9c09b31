"""Bet registry: creation, lookup, listing and per-bet statistics."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prophet.errors import BetNotFound, MarketNotFound
from prophet.models import ArbitratorDecision, Bet, Market, Participant, User
from prophet.schemas import BetCreate
from prophet.services.payouts import StakeLine, payout_multiplier, side_totals
from prophet.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": Bet.created_at,
    "deadline": Bet.deadline,
    "total_pool": Bet.total_pool,
    "title": Bet.title,
}


@dataclass
class BetStatistics:
    total_participants: int
    yes_count: int
    no_count: int
    yes_amount: Decimal
    no_amount: Decimal
    potential_payout_yes: Optional[float]
    potential_payout_no: Optional[float]


class BetService:
    """
    Handles bet creation and read access to bets and their participants.
    """

    async def create_bet(
        self,
        db: AsyncSession,
        creator: User,
        request: BetCreate,
        now: Optional[datetime] = None,
    ) -> Bet:
        """Create a bet open for staking until its deadline."""
        if request.market_id is not None:
            market = await db.execute(select(Market.id).where(Market.id == request.market_id))
            if market.scalar_one_or_none() is None:
                raise MarketNotFound()

        now = now or utc_now()
        bet = Bet(
            creator_id=creator.id,
            market_id=request.market_id,
            title=request.title,
            description=request.description,
            deadline=request.deadline,
            arbitrator_type=request.arbitrator_type.value,
            arbitrator_email=request.arbitrator_email,
            minimum_stake=request.minimum_stake,
            total_pool=Decimal("0.00"),
            resolved=False,
            created_at=now,
            updated_at=now,
        )
        db.add(bet)
        await db.commit()

        logger.info(
            f"Created bet {bet.id} {bet.title!r} "
            f"(arbitrator={bet.arbitrator_type}, deadline={bet.deadline.isoformat()})"
        )
        return bet

    async def get_bet(
        self,
        db: AsyncSession,
        bet_id: UUID,
        for_update: bool = False,
    ) -> Bet:
        """Fetch a bet or raise BetNotFound. ``for_update`` takes a row lock."""
        query = select(Bet).where(Bet.id == bet_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        bet = result.scalar_one_or_none()
        if bet is None:
            raise BetNotFound()
        return bet

    async def get_bet_with_details(self, db: AsyncSession, bet_id: UUID) -> Bet:
        """Fetch a bet with creator, market and decision loaded."""
        result = await db.execute(
            select(Bet)
            .options(
                selectinload(Bet.creator),
                selectinload(Bet.market),
                selectinload(Bet.decision).selectinload(ArbitratorDecision.arbitrator),
            )
            .where(Bet.id == bet_id)
        )
        bet = result.scalar_one_or_none()
        if bet is None:
            raise BetNotFound()
        return bet

    async def list_participants(
        self,
        db: AsyncSession,
        bet_id: UUID,
        newest_first: bool = False,
    ) -> list[Participant]:
        """All stakes on a bet, with users loaded."""
        order = Participant.created_at.desc() if newest_first else Participant.created_at.asc()
        result = await db.execute(
            select(Participant)
            .options(selectinload(Participant.user))
            .where(Participant.bet_id == bet_id)
            .order_by(order, Participant.id)
        )
        return list(result.scalars().all())

    async def get_participation(
        self,
        db: AsyncSession,
        bet_id: UUID,
        user_id: UUID,
    ) -> Optional[Participant]:
        result = await db.execute(
            select(Participant)
            .where(Participant.bet_id == bet_id)
            .where(Participant.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_bets(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        status: str = "all",
        category: Optional[str] = None,
        search: Optional[str] = None,
        creator_id: Optional[UUID] = None,
        arbitrator_type: Optional[str] = None,
        sort: str = "created_at",
        ascending: bool = False,
        now: Optional[datetime] = None,
    ) -> tuple[list[Bet], int]:
        """
        List bets matching the filters.

        Status:
        - active: unresolved and deadline not yet passed
        - resolved: resolved
        - expired: unresolved with the deadline passed
        """
        now = now or utc_now()
        filters = []

        if status == "active":
            filters += [Bet.resolved.is_(False), Bet.deadline > now]
        elif status == "resolved":
            filters.append(Bet.resolved.is_(True))
        elif status == "expired":
            filters += [Bet.resolved.is_(False), Bet.deadline <= now]

        if category:
            filters.append(
                Bet.market_id.in_(select(Market.id).where(Market.category == category))
            )
        if search:
            pattern = f"%{search}%"
            filters.append(or_(Bet.title.ilike(pattern), Bet.description.ilike(pattern)))
        if creator_id:
            filters.append(Bet.creator_id == creator_id)
        if arbitrator_type:
            filters.append(Bet.arbitrator_type == arbitrator_type)

        total = (await db.execute(select(func.count(Bet.id)).where(*filters))).scalar_one()

        sort_column = SORT_COLUMNS.get(sort, Bet.created_at)
        order = sort_column.asc() if ascending else sort_column.desc()

        result = await db.execute(
            select(Bet)
            .options(
                selectinload(Bet.creator),
                selectinload(Bet.market),
                selectinload(Bet.participants),
            )
            .where(*filters)
            .order_by(order, Bet.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def list_unresolved_ai_bets(
        self,
        db: AsyncSession,
        now: Optional[datetime] = None,
    ) -> list[Bet]:
        """AI-arbitrated bets whose deadline has passed but are not resolved."""
        now = now or utc_now()
        result = await db.execute(
            select(Bet)
            .where(Bet.arbitrator_type == "ai")
            .where(Bet.resolved.is_(False))
            .where(Bet.deadline < now)
            .order_by(Bet.deadline)
        )
        return list(result.scalars().all())

    def calculate_stats(self, participants: list[Participant]) -> BetStatistics:
        """Side counts, amounts and the payout multiplier for each side."""
        lines = [to_stake_line(p) for p in participants]
        yes_amount, no_amount = side_totals(lines)
        total = yes_amount + no_amount
        yes_count = sum(1 for line in lines if line.prediction)

        return BetStatistics(
            total_participants=len(lines),
            yes_count=yes_count,
            no_count=len(lines) - yes_count,
            yes_amount=yes_amount,
            no_amount=no_amount,
            potential_payout_yes=payout_multiplier(yes_amount, total),
            potential_payout_no=payout_multiplier(no_amount, total),
        )


def to_stake_line(participant: Participant) -> StakeLine:
    return StakeLine(
        participant_id=participant.id,
        user_id=participant.user_id,
        prediction=participant.prediction,
        stake_amount=Decimal(participant.stake_amount),
        created_at=participant.created_at,
    )


# Singleton instance
bet_service = BetService()
