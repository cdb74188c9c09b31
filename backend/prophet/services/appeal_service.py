"""Appeal workflow for AI-arbitrated resolutions."""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prophet.config import get_settings
from prophet.errors import (
    AlreadyAppealed,
    AppealWindowExpired,
    BetNotResolved,
    NotAIArbitrated,
    NotParticipant,
)
from prophet.models import Appeal, ArbitratorDecision
from prophet.services.bet_service import bet_service
from prophet.utils.time_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


class AppealService:
    """
    Admits appeals against AI decisions.

    An appeal is only recorded as pending; nothing here re-resolves a bet.
    """

    async def create_appeal(
        self,
        db: AsyncSession,
        user_id: UUID,
        bet_id: UUID,
        reason: str,
        now: Optional[datetime] = None,
    ) -> Appeal:
        """
        File an appeal.

        Checks, in order: bet exists, bet resolved, AI arbitrated, requester
        participated, no earlier appeal, still inside the appeal window.
        """
        now = now or utc_now()
        window = timedelta(days=get_settings().appeals.window_days)

        bet = await bet_service.get_bet(db, bet_id)
        if not bet.resolved:
            raise BetNotResolved()
        if bet.arbitrator_type != "ai":
            raise NotAIArbitrated()
        if await bet_service.get_participation(db, bet_id, user_id) is None:
            raise NotParticipant()
        if await self.get_appeal(db, bet_id, user_id) is not None:
            raise AlreadyAppealed()
        if now > as_utc(bet.resolved_at) + window:
            raise AppealWindowExpired(
                f"Appeal deadline has passed ({window.days} days after resolution)"
            )

        appeal = Appeal(
            bet_id=bet_id,
            user_id=user_id,
            reason=reason,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        db.add(appeal)
        await db.execute(
            update(ArbitratorDecision)
            .where(ArbitratorDecision.bet_id == bet_id)
            .values(appeal_count=ArbitratorDecision.appeal_count + 1)
        )

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise AlreadyAppealed()

        logger.info(f"Appeal {appeal.id} filed on bet {bet_id} by user {user_id}")
        return appeal

    async def get_appeal(
        self,
        db: AsyncSession,
        bet_id: UUID,
        user_id: UUID,
    ) -> Optional[Appeal]:
        result = await db.execute(
            select(Appeal).where(Appeal.bet_id == bet_id).where(Appeal.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_appeals(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
    ) -> tuple[list[Appeal], int]:
        """The user's appeals, newest first, with their bets loaded."""
        filters = [Appeal.user_id == user_id]
        if status and status != "all":
            filters.append(Appeal.status == status)

        total = (await db.execute(select(func.count(Appeal.id)).where(*filters))).scalar_one()

        result = await db.execute(
            select(Appeal)
            .options(selectinload(Appeal.bet))
            .where(*filters)
            .order_by(Appeal.created_at.desc(), Appeal.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total


# Singleton instance
appeal_service = AppealService()
