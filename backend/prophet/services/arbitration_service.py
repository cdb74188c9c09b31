"""AI arbitration: ask a judge for the outcome, then resolve and pay."""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from prophet.agents.arbitrator import ArbitrationVerdict, BetQuestion, Judge, get_judge
from prophet.config import get_settings
from prophet.database.session import get_db_session
from prophet.errors import (
    AlreadyResolved,
    DeadlineNotReached,
    JudgmentUnavailable,
    NotAIArbitrated,
    ProphetError,
)
from prophet.models import Bet
from prophet.services.bet_service import bet_service
from prophet.services.resolution_service import ResolutionResult, resolution_service
from prophet.utils.time_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass
class ArbitrationOutcome:
    verdict: ArbitrationVerdict
    resolution: ResolutionResult


@dataclass
class SweepReport:
    checked: int = 0
    resolved: list[UUID] = field(default_factory=list)
    failed: dict[UUID, str] = field(default_factory=dict)


def ensure_ai_resolvable(bet: Bet, now: datetime) -> None:
    """AI arbitration preconditions, checked again under the bet lock."""
    if bet.resolved:
        raise AlreadyResolved()
    if bet.arbitrator_type != "ai":
        raise NotAIArbitrated()
    if now <= as_utc(bet.deadline):
        raise DeadlineNotReached()


class ArbitrationService:
    """
    Settles AI-arbitrated bets.

    The judge is consulted outside the bet lock with a bounded timeout;
    only the final resolve-and-pay step is serialized.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def judge_outcome(
        self,
        question: BetQuestion,
        judge: Optional[Judge] = None,
    ) -> ArbitrationVerdict:
        """
        Get a verdict, applying the configured failure policy.

        - defer: raise JudgmentUnavailable, leaving the bet unresolved
        - random: fall back to a uniformly random decision
        """
        config = get_settings().arbitration
        judge = judge or get_judge()

        try:
            return await asyncio.wait_for(
                judge.judge(question), timeout=config.timeout_seconds
            )
        except asyncio.TimeoutError:
            failure = f"timed out after {config.timeout_seconds}s"
        except Exception as e:
            logger.error(f"Arbitrator failed for {question.title!r}: {e}", exc_info=True)
            failure = str(e) or e.__class__.__name__

        if config.failure_policy == "random":
            logger.warning(
                f"Arbitrator unavailable for {question.title!r} ({failure}), "
                f"falling back to a random decision"
            )
            return ArbitrationVerdict(
                decision=self._rng.random() > 0.5,
                reasoning="AI arbitration failed, random decision made as fallback",
            )

        logger.warning(
            f"Arbitrator unavailable for {question.title!r} ({failure}), deferring"
        )
        raise JudgmentUnavailable(f"AI arbitrator unavailable: {failure}")

    async def arbitrate(
        self,
        db: AsyncSession,
        bet_id: UUID,
        judge: Optional[Judge] = None,
        now: Optional[datetime] = None,
    ) -> ArbitrationOutcome:
        """Judge one AI bet and resolve it with the verdict."""
        now = now or utc_now()

        bet = await bet_service.get_bet(db, bet_id)
        ensure_ai_resolvable(bet, now)
        question = BetQuestion(
            title=bet.title,
            description=bet.description,
            deadline=as_utc(bet.deadline),
        )

        verdict = await self.judge_outcome(question, judge)

        resolution = await resolution_service.resolve_and_pay(
            db,
            bet_id=bet_id,
            outcome=verdict.decision,
            arbitrator_id=None,
            reasoning=verdict.reasoning,
            is_ai_decision=True,
            authorize=lambda locked: ensure_ai_resolvable(locked, now),
            now=now,
        )
        return ArbitrationOutcome(verdict=verdict, resolution=resolution)

    async def sweep(
        self,
        judge: Optional[Judge] = None,
        now: Optional[datetime] = None,
    ) -> SweepReport:
        """
        Arbitrate every AI bet whose deadline has passed.

        Each bet gets its own session; a failure on one bet is logged and
        the sweep moves on.
        """
        now = now or utc_now()
        report = SweepReport()

        async with get_db_session() as db:
            due = [bet.id for bet in await bet_service.list_unresolved_ai_bets(db, now)]
        report.checked = len(due)

        for bet_id in due:
            try:
                async with get_db_session() as db:
                    await self.arbitrate(db, bet_id, judge=judge, now=now)
                report.resolved.append(bet_id)
            except ProphetError as e:
                logger.warning(f"Sweep skipped bet {bet_id}: {e.code} {e.message}")
                report.failed[bet_id] = e.code
            except Exception as e:
                logger.error(f"Sweep failed on bet {bet_id}: {e}", exc_info=True)
                report.failed[bet_id] = ProphetError.code

        logger.info(
            f"AI sweep: {report.checked} due, {len(report.resolved)} resolved, "
            f"{len(report.failed)} deferred"
        )
        return report


# Singleton instance
arbitration_service = ArbitrationService()
