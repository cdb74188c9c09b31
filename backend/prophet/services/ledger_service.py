"""Append-only credit ledger. Balances are folded from transactions on read."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.config import get_settings
from prophet.models import Bet, CreditTransaction, Participant, User
from prophet.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Records credit movements and derives balances.

    Entries are never updated or deleted. Callers own the transaction:
    nothing here commits, so ledger writes land atomically with the
    stake or resolution that caused them.
    """

    def append(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: Decimal,
        type: str,
        description: Optional[str] = None,
        bet_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> CreditTransaction:
        """Stage a ledger entry on the session."""
        entry = CreditTransaction(
            user_id=user_id,
            bet_id=bet_id,
            amount=amount,
            type=type,
            description=description,
            created_at=now or utc_now(),
        )
        db.add(entry)
        return entry

    async def get_balance(self, db: AsyncSession, user_id: UUID) -> Decimal:
        """Sum of every ledger entry for the user."""
        result = await db.execute(
            select(func.coalesce(func.sum(CreditTransaction.amount), 0))
            .where(CreditTransaction.user_id == user_id)
        )
        return Decimal(result.scalar_one()).quantize(Decimal("0.01"))

    async def get_recent_transactions(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 10,
    ) -> list[CreditTransaction]:
        result = await db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_transactions(self, db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            select(func.count(CreditTransaction.id))
            .where(CreditTransaction.user_id == user_id)
        )
        return result.scalar_one()

    async def count_active_bets(self, db: AsyncSession, user_id: UUID) -> int:
        """Unresolved bets the user has a stake in."""
        result = await db.execute(
            select(func.count(Participant.id))
            .join(Bet, Bet.id == Participant.bet_id)
            .where(Participant.user_id == user_id)
            .where(Bet.resolved.is_(False))
        )
        return result.scalar_one()

    async def ensure_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        email: str,
        now: Optional[datetime] = None,
    ) -> User:
        """
        Fetch the user, creating it with a signup bonus on first sight.

        ``email`` is the address the identity provider verified on this
        request; a stored address that differs is overwritten with it.
        Commits when a user is created or updated so later requests see it.
        """
        now = now or utc_now()

        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is not None:
            return await self._sync_email(db, user, email, now)

        user = User(
            id=user_id,
            email=email,
            role="user",
            created_at=now,
            updated_at=now,
        )
        db.add(user)

        bonus = Decimal(str(get_settings().ledger.signup_bonus)).quantize(Decimal("0.01"))
        if bonus > 0:
            self.append(
                db,
                user_id=user_id,
                amount=bonus,
                type="signup_bonus",
                description="Welcome credits",
                now=now,
            )

        try:
            await db.commit()
        except IntegrityError:
            # Concurrent first request for the same identity won the insert
            await db.rollback()
            result = await db.execute(select(User).where(User.id == user_id))
            return await self._sync_email(db, result.scalar_one(), email, now)

        logger.info(f"Registered user {email} with {bonus} signup credits")
        return user

    async def _sync_email(
        self,
        db: AsyncSession,
        user: User,
        email: str,
        now: datetime,
    ) -> User:
        if user.email == email:
            return user

        previous = user.email
        user.email = email
        user.updated_at = now
        await db.commit()

        logger.info(f"User {user.id} email changed from {previous} to {email}")
        return user


# Singleton instance
ledger_service = LedgerService()
