"""
Integration Test: AI Arbitration

Test cases:
- Verdict resolves the bet as an AI decision and pays out
- Preconditions: AI bet, deadline passed, not yet resolved
- Deferred judgment leaves the bet open
- Sweep settles every overdue AI bet
- A storage failure on one bet does not stop the sweep
"""

import asyncio
from decimal import Decimal

import pytest
from pydantic_ai.models.test import TestModel
from sqlalchemy.exc import OperationalError

from prophet.agents.arbitrator import ArbitrationVerdict, BetQuestion, LLMJudge
from prophet.database import get_db_session
from prophet.errors import (
    AlreadyResolved,
    DeadlineNotReached,
    JudgmentUnavailable,
    NotAIArbitrated,
)
from prophet.services import arbitration_service, resolution_service
from prophet.utils.time_utils import utc_now


class FixedJudge:
    def __init__(self, decision: bool):
        self.decision = decision
        self.questions: list[BetQuestion] = []

    async def judge(self, question: BetQuestion) -> ArbitrationVerdict:
        self.questions.append(question)
        return ArbitrationVerdict(decision=self.decision, reasoning="Official results say so.")


class DownJudge:
    async def judge(self, question: BetQuestion) -> ArbitrationVerdict:
        raise ConnectionError("provider unreachable")


async def arbitrate(bet, judge, now):
    async with get_db_session() as db:
        return await arbitration_service.arbitrate(db, bet.id, judge=judge, now=now)


def test_verdict_resolves_bet_as_ai_decision(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        yes_bettor = await factory.user()
        no_bettor = await factory.user()
        bet = await factory.bet(creator, arbitrator_type="ai")
        await factory.stake(bet, yes_bettor, True, "40")
        await factory.stake(bet, no_bettor, False, "10")

        judge = FixedJudge(decision=False)
        outcome = await arbitrate(bet, judge, factory.after_deadline(bet))

        assert outcome.verdict.decision is False
        assert outcome.resolution.total_payout == Decimal("50.00")
        assert outcome.resolution.winners_count == 1
        assert judge.questions[0].title == bet.title

        assert await factory.balance(no_bettor) == Decimal("140.00")
        assert await factory.balance(yes_bettor) == Decimal("60.00")

        resolved = await factory.reload(bet)
        assert resolved.outcome is False
        assert resolved.decision.is_ai_decision is True
        assert resolved.decision.arbitrator_id is None
        assert resolved.decision.reasoning == "Official results say so."

    asyncio.run(run())


def test_llm_judge_drives_resolution(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bet = await factory.bet(creator, arbitrator_type="ai")

        outcome = await arbitrate(bet, LLMJudge(model=TestModel()), factory.after_deadline(bet))

        assert isinstance(outcome.verdict.decision, bool)
        assert (await factory.reload(bet)).resolved is True

    asyncio.run(run())


def test_arbitration_preconditions(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        manual_bet = await factory.bet(creator)
        ai_bet = await factory.bet(creator, arbitrator_type="ai")
        judge = FixedJudge(decision=True)

        with pytest.raises(NotAIArbitrated):
            await arbitrate(manual_bet, judge, factory.after_deadline(manual_bet))
        with pytest.raises(DeadlineNotReached):
            await arbitrate(ai_bet, judge, utc_now())

        await arbitrate(ai_bet, judge, factory.after_deadline(ai_bet))
        with pytest.raises(AlreadyResolved):
            await arbitrate(ai_bet, judge, factory.after_deadline(ai_bet, hours=2))

        # the judge is never consulted when preconditions fail
        assert len(judge.questions) == 1

    asyncio.run(run())


def test_deferred_judgment_leaves_bet_open(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bettor = await factory.user()
        bet = await factory.bet(creator, arbitrator_type="ai")
        await factory.stake(bet, bettor, True, "25")

        with pytest.raises(JudgmentUnavailable):
            await arbitrate(bet, DownJudge(), factory.after_deadline(bet))

        assert (await factory.reload(bet)).resolved is False
        assert await factory.balance(bettor) == Decimal("75.00")

    asyncio.run(run())


def test_sweep_settles_overdue_ai_bets(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        first = await factory.bet(creator, arbitrator_type="ai", title="First overdue AI bet")
        second = await factory.bet(creator, arbitrator_type="ai", title="Second overdue AI bet")
        manual = await factory.bet(creator, title="Creator-judged bet")

        report = await arbitration_service.sweep(
            judge=FixedJudge(decision=True),
            now=factory.after_deadline(second),
        )

        assert report.checked == 2
        assert set(report.resolved) == {first.id, second.id}
        assert report.failed == {}
        assert (await factory.reload(manual)).resolved is False

        # nothing left to do on the next pass
        again = await arbitration_service.sweep(
            judge=FixedJudge(decision=True),
            now=factory.after_deadline(second),
        )
        assert again.checked == 0

    asyncio.run(run())


def test_sweep_reports_deferred_bets(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bet = await factory.bet(creator, arbitrator_type="ai")

        report = await arbitration_service.sweep(judge=DownJudge(), now=factory.after_deadline(bet))

        assert report.resolved == []
        assert report.failed == {bet.id: "JUDGMENT_UNAVAILABLE"}

    asyncio.run(run())


def test_sweep_continues_past_storage_failure(factory, monkeypatch) -> None:
    async def run() -> None:
        creator = await factory.user()
        broken = await factory.bet(creator, arbitrator_type="ai", title="Bet hitting a locked table")
        healthy = await factory.bet(creator, arbitrator_type="ai", title="Bet settling normally")

        resolve_and_pay = resolution_service.resolve_and_pay

        async def flaky_resolve_and_pay(db, bet_id, **kwargs):
            if bet_id == broken.id:
                raise OperationalError("UPDATE bets", {}, Exception("database is locked"))
            return await resolve_and_pay(db, bet_id, **kwargs)

        monkeypatch.setattr(resolution_service, "resolve_and_pay", flaky_resolve_and_pay)

        report = await arbitration_service.sweep(
            judge=FixedJudge(decision=False),
            now=factory.after_deadline(healthy),
        )

        assert report.checked == 2
        assert report.resolved == [healthy.id]
        assert report.failed == {broken.id: "INTERNAL_ERROR"}
        assert (await factory.reload(healthy)).resolved is True
        assert (await factory.reload(broken)).resolved is False

    asyncio.run(run())
