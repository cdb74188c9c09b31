"""Resolution engine: who may resolve, and atomic resolve-and-pay."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.errors import (
    AIResolutionRequired,
    AlreadyResolved,
    DeadlineNotReached,
    NotAuthorizedToResolve,
)
from prophet.models import ArbitratorDecision, Bet
from prophet.services.bet_service import bet_service, to_stake_line
from prophet.services.ledger_service import ledger_service
from prophet.services.locks import KeyedLockRegistry, bet_locks
from prophet.services.payouts import compute_payouts
from prophet.utils.time_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requester:
    """Identity asking to resolve a bet, as verified by the auth provider."""

    user_id: UUID
    email: str


@dataclass
class ResolutionResult:
    decision_id: UUID
    outcome: bool
    total_payout: Decimal
    winners_count: int
    payout_policy: str


def ensure_resolvable(bet: Bet, now: datetime) -> None:
    """Resolution preconditions shared by the manual and AI paths."""
    if bet.resolved:
        raise AlreadyResolved()
    if now <= as_utc(bet.deadline):
        raise DeadlineNotReached()


def authorize_manual_resolution(bet: Bet, requester: Requester, now: datetime) -> None:
    """
    Raise unless ``requester`` may resolve ``bet`` by hand right now.

    Order: already resolved, deadline, then the arbitrator type.
    AI bets can never be resolved by hand.
    """
    ensure_resolvable(bet, now)

    if bet.arbitrator_type == "creator":
        if requester.user_id != bet.creator_id:
            raise NotAuthorizedToResolve()
    elif bet.arbitrator_type == "friend":
        if not bet.arbitrator_email or requester.email != bet.arbitrator_email:
            raise NotAuthorizedToResolve()
    elif bet.arbitrator_type == "ai":
        raise AIResolutionRequired()
    else:
        raise NotAuthorizedToResolve()


class ResolutionService:
    """
    Resolves bets exactly once.

    The decision row, the ledger payouts and the resolved flag are written
    in one transaction while the bet lock (and the bet row lock) is held.
    """

    def __init__(self, lock_registry: KeyedLockRegistry = bet_locks):
        self._locks = lock_registry

    async def resolve_manually(
        self,
        db: AsyncSession,
        bet_id: UUID,
        requester: Requester,
        outcome: bool,
        reasoning: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ResolutionResult:
        """Creator or friend resolution."""
        now = now or utc_now()
        return await self.resolve_and_pay(
            db,
            bet_id=bet_id,
            outcome=outcome,
            arbitrator_id=requester.user_id,
            reasoning=reasoning,
            is_ai_decision=False,
            authorize=lambda bet: authorize_manual_resolution(bet, requester, now),
            now=now,
        )

    async def resolve_and_pay(
        self,
        db: AsyncSession,
        bet_id: UUID,
        outcome: bool,
        arbitrator_id: Optional[UUID],
        reasoning: Optional[str],
        is_ai_decision: bool,
        authorize=None,
        now: Optional[datetime] = None,
    ) -> ResolutionResult:
        """
        Resolve a bet and distribute its pool atomically.

        ``authorize`` is called with the locked bet and must raise to
        refuse; without it only the shared preconditions are checked.
        """
        now = now or utc_now()

        async with self._locks.hold(bet_id):
            try:
                bet = await bet_service.get_bet(db, bet_id, for_update=True)
                if authorize is not None:
                    authorize(bet)
                else:
                    ensure_resolvable(bet, now)

                participants = await bet_service.list_participants(db, bet_id)
                plan = compute_payouts([to_stake_line(p) for p in participants], outcome)

                decision = ArbitratorDecision(
                    bet_id=bet.id,
                    arbitrator_id=arbitrator_id,
                    outcome=outcome,
                    reasoning=reasoning,
                    is_ai_decision=is_ai_decision,
                    payout_policy=plan.policy,
                    total_payout=plan.total_payout,
                    winners_count=plan.winners_count,
                    appeal_count=0,
                    decided_at=now,
                )
                db.add(decision)

                for payout in plan.payouts:
                    ledger_service.append(
                        db,
                        user_id=payout.user_id,
                        amount=payout.amount,
                        type="refund" if payout.is_refund else "payout",
                        description=(
                            f"Refund for {bet.title} (no winning stakes)"
                            if payout.is_refund
                            else f"Payout for {bet.title}"
                        ),
                        bet_id=bet.id,
                        now=now,
                    )

                bet.resolved = True
                bet.outcome = outcome
                bet.resolved_at = now
                bet.updated_at = now

                await db.commit()
            except IntegrityError:
                # decision.bet_id is unique: another writer resolved first
                await db.rollback()
                raise AlreadyResolved()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            f"Resolved bet {bet_id} as {'YES' if outcome else 'NO'} "
            f"({'AI' if is_ai_decision else 'manual'}, policy={plan.policy}, "
            f"paid {plan.total_payout} to {plan.winners_count} winners)"
        )
        return ResolutionResult(
            decision_id=decision.id,
            outcome=outcome,
            total_payout=plan.total_payout,
            winners_count=plan.winners_count,
            payout_policy=plan.policy,
        )


# Singleton instance
resolution_service = ResolutionService()
