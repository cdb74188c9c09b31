"""
Integration Test: Resolution and Payouts

Test cases:
- Proportional payouts land in the ledger and conserve the pool
- A bet is paid exactly once, also under concurrent resolution
- Deadline, friend and AI rules enforced against stored bets
- Refund and empty-pool policies
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from prophet.database import get_db_session
from prophet.errors import (
    AIResolutionRequired,
    AlreadyResolved,
    DeadlineNotReached,
    NotAuthorizedToResolve,
)
from prophet.models import CreditTransaction
from prophet.utils.time_utils import utc_now


async def payout_entries(bet) -> list[CreditTransaction]:
    async with get_db_session() as db:
        result = await db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.bet_id == bet.id)
            .where(CreditTransaction.type.in_(["payout", "refund"]))
        )
        return list(result.scalars().all())


def test_winners_share_pool_and_losers_get_nothing(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        yes_bettors = [await factory.user() for _ in range(3)]
        no_bettor = await factory.user()
        bet = await factory.bet(creator)

        for bettor in yes_bettors:
            await factory.stake(bet, bettor, True, "100")
        await factory.stake(bet, no_bettor, False, "100")

        result = await factory.resolve(bet, creator, True)

        assert result.payout_policy == "proportional"
        assert result.total_payout == Decimal("400.00")
        assert result.winners_count == 3

        # 400 / 3 each; the leftover cent goes to the earliest stake
        balances = [await factory.balance(b) for b in yes_bettors]
        assert balances == [Decimal("133.34"), Decimal("133.33"), Decimal("133.33")]
        assert await factory.balance(no_bettor) == Decimal("0.00")

        entries = await payout_entries(bet)
        assert sum(e.amount for e in entries) == Decimal("400.00")

        resolved = await factory.reload(bet)
        assert resolved.resolved is True
        assert resolved.outcome is True
        assert resolved.resolved_at is not None
        assert resolved.decision.arbitrator_id == creator.id
        assert resolved.decision.is_ai_decision is False
        assert resolved.decision.total_payout == Decimal("400.00")

    asyncio.run(run())


def test_second_resolution_fails_without_paying_again(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bettor = await factory.user()
        bet = await factory.bet(creator)
        await factory.stake(bet, bettor, True, "50")

        await factory.resolve(bet, creator, True)
        with pytest.raises(AlreadyResolved):
            await factory.resolve(bet, creator, False)

        assert await factory.balance(bettor) == Decimal("100.00")
        assert len(await payout_entries(bet)) == 1
        assert (await factory.reload(bet)).outcome is True

    asyncio.run(run())


def test_concurrent_resolutions_pay_once(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        yes_bettor = await factory.user()
        no_bettor = await factory.user()
        bet = await factory.bet(creator)
        await factory.stake(bet, yes_bettor, True, "20")
        await factory.stake(bet, no_bettor, False, "60")

        results = await asyncio.gather(
            factory.resolve(bet, creator, True),
            factory.resolve(bet, creator, False),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], AlreadyResolved)

        entries = await payout_entries(bet)
        assert len(entries) == 1
        assert entries[0].amount == Decimal("80.00")

        async with get_db_session() as db:
            count = await db.execute(
                select(func.count()).select_from(CreditTransaction)
                .where(CreditTransaction.bet_id == bet.id)
            )
        # two stakes plus the single payout
        assert count.scalar_one() == 3

    asyncio.run(run())


def test_resolution_before_deadline_fails(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bet = await factory.bet(creator)

        with pytest.raises(DeadlineNotReached):
            await factory.resolve(bet, creator, True, now=utc_now())
        with pytest.raises(DeadlineNotReached):
            await factory.resolve(bet, creator, True, now=bet.deadline)

        assert (await factory.reload(bet)).resolved is False

    asyncio.run(run())


def test_friend_arbitrator_resolves_by_email(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        friend = await factory.user(email="judge@example.com")
        bet = await factory.bet(
            creator, arbitrator_type="friend", arbitrator_email="judge@example.com"
        )

        with pytest.raises(NotAuthorizedToResolve):
            await factory.resolve(bet, creator, True)

        result = await factory.resolve(bet, friend, False)
        assert result.payout_policy == "empty"
        assert (await factory.reload(bet)).decision.arbitrator_id == friend.id

    asyncio.run(run())


def test_ai_bet_rejects_manual_resolution(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bet = await factory.bet(creator, arbitrator_type="ai")

        with pytest.raises(AIResolutionRequired):
            await factory.resolve(bet, creator, True)

    asyncio.run(run())


def test_no_winning_stake_refunds_everyone(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        first = await factory.user()
        second = await factory.user()
        bet = await factory.bet(creator)
        await factory.stake(bet, first, True, "30")
        await factory.stake(bet, second, True, "45.50")

        result = await factory.resolve(bet, creator, False)

        assert result.payout_policy == "refund"
        assert result.total_payout == Decimal("75.50")
        assert result.winners_count == 0
        assert await factory.balance(first) == Decimal("100.00")
        assert await factory.balance(second) == Decimal("100.00")
        assert {e.type for e in await payout_entries(bet)} == {"refund"}

    asyncio.run(run())


def test_empty_bet_resolves_without_payouts(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bet = await factory.bet(creator)

        result = await factory.resolve(bet, creator, True)

        assert result.payout_policy == "empty"
        assert result.total_payout == Decimal("0")
        assert await payout_entries(bet) == []

    asyncio.run(run())
