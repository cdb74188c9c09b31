"""Stake placement against open bets."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.errors import (
    AlreadyParticipated,
    BetResolved,
    DeadlinePassed,
    InsufficientCredits,
    StakeBelowMinimum,
)
from prophet.models import Participant, User
from prophet.services.bet_service import bet_service
from prophet.services.ledger_service import ledger_service
from prophet.services.locks import KeyedLockRegistry, bet_locks, user_locks
from prophet.utils.time_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass
class StakeReceipt:
    participant_id: UUID
    new_balance: Decimal


class StakingService:
    """
    Records one stake per user per bet.

    The bet lock is taken first and the user lock second, and both are
    held until commit, so the participation and balance checks cannot be
    raced by a concurrent stake.
    """

    def __init__(
        self,
        bet_lock_registry: KeyedLockRegistry = bet_locks,
        user_lock_registry: KeyedLockRegistry = user_locks,
    ):
        self._bet_locks = bet_lock_registry
        self._user_locks = user_lock_registry

    async def record_stake(
        self,
        db: AsyncSession,
        bet_id: UUID,
        user_id: UUID,
        prediction: bool,
        amount: Decimal,
        now: Optional[datetime] = None,
    ) -> StakeReceipt:
        """
        Place a stake.

        Process:
        1. Lock the bet, validate it is open and the amount meets the minimum
        2. Reject a second stake from the same user
        3. Lock the user, verify the ledger balance covers the stake
        4. Insert participant, debit ledger, grow the pool, commit
        """
        now = now or utc_now()
        amount = Decimal(amount).quantize(Decimal("0.01"))

        async with self._bet_locks.hold(bet_id), self._user_locks.hold(user_id):
            try:
                bet = await bet_service.get_bet(db, bet_id, for_update=True)

                if bet.resolved:
                    raise BetResolved()
                if as_utc(bet.deadline) <= now:
                    raise DeadlinePassed()
                if amount <= 0 or amount < bet.minimum_stake:
                    raise StakeBelowMinimum(
                        f"Stake must be at least {bet.minimum_stake} credits"
                    )

                if await bet_service.get_participation(db, bet_id, user_id) is not None:
                    raise AlreadyParticipated()

                await db.execute(select(User.id).where(User.id == user_id).with_for_update())
                balance = await ledger_service.get_balance(db, user_id)
                if balance < amount:
                    raise InsufficientCredits(
                        f"Insufficient credits: balance {balance} < stake {amount}"
                    )

                participant = Participant(
                    bet_id=bet_id,
                    user_id=user_id,
                    prediction=prediction,
                    stake_amount=amount,
                    created_at=now,
                )
                db.add(participant)
                ledger_service.append(
                    db,
                    user_id=user_id,
                    amount=-amount,
                    type="stake",
                    description=f"Stake {'YES' if prediction else 'NO'} on {bet.title}",
                    bet_id=bet_id,
                    now=now,
                )
                bet.total_pool = Decimal(bet.total_pool) + amount
                bet.updated_at = now

                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise AlreadyParticipated()
            except Exception:
                await db.rollback()
                raise

        new_balance = balance - amount
        logger.info(
            f"Stake placed on bet {bet_id}: user {user_id} "
            f"{'YES' if prediction else 'NO'} {amount} (pool {bet.total_pool})"
        )
        return StakeReceipt(participant_id=participant.id, new_balance=new_balance)


# Singleton instance
staking_service = StakingService()
