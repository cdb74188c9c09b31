"""
Unit Tests: Payout Calculator

Test cases:
- Proportional split of the pool among winners
- Cent rounding that never creates or loses credits
- Refund when nobody picked the winning side
- Empty pool
- Display multipliers
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from prophet.services.payouts import (
    EMPTY,
    PROPORTIONAL,
    REFUND,
    StakeLine,
    compute_payouts,
    payout_multiplier,
)

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def line(prediction: bool, amount: str, minutes: int = 0) -> StakeLine:
    return StakeLine(
        participant_id=uuid4(),
        user_id=uuid4(),
        prediction=prediction,
        stake_amount=Decimal(amount),
        created_at=T0 + timedelta(minutes=minutes),
    )


def amounts_by_participant(plan) -> dict:
    return {p.participant_id: p.amount for p in plan.payouts}


def test_yes_side_shares_whole_pool_in_proportion() -> None:
    big = line(True, "200", minutes=0)
    small = line(True, "100", minutes=1)
    loser = line(False, "100", minutes=2)

    plan = compute_payouts([big, small, loser], outcome=True)
    paid = amounts_by_participant(plan)

    assert plan.policy == PROPORTIONAL
    assert plan.total_pool == Decimal("400")
    assert plan.winning_total == Decimal("300")
    # 266.666... and 133.333...: the leftover cent goes to the larger remainder
    assert paid[big.participant_id] == Decimal("266.67")
    assert paid[small.participant_id] == Decimal("133.33")
    assert loser.participant_id not in paid
    assert plan.total_payout == Decimal("400.00")
    assert plan.winners_count == 2


def test_single_winner_takes_everything() -> None:
    winner = line(False, "25.50")
    losers = [line(True, "10"), line(True, "14.50")]

    plan = compute_payouts([winner, *losers], outcome=False)

    assert [p.amount for p in plan.payouts] == [Decimal("50.00")]
    assert plan.winners_count == 1


def test_equal_remainders_break_ties_by_earliest_stake() -> None:
    late = line(True, "10", minutes=5)
    early = line(True, "10", minutes=0)
    middle = line(True, "10", minutes=3)
    loser = line(False, "10", minutes=1)

    plan = compute_payouts([late, early, middle, loser], outcome=True)
    paid = amounts_by_participant(plan)

    # 40 / 3 = 13.333... each; one leftover cent
    assert paid[early.participant_id] == Decimal("13.34")
    assert paid[middle.participant_id] == Decimal("13.33")
    assert paid[late.participant_id] == Decimal("13.33")
    assert plan.total_payout == Decimal("40.00")


def test_payouts_always_sum_to_pool() -> None:
    pools = [
        [line(True, "33.33"), line(True, "66.67"), line(False, "0.01")],
        [line(True, "7"), line(True, "11"), line(True, "13"), line(False, "17.03")],
        [line(False, "0.01"), line(False, "0.02"), line(True, "99.99")],
        [line(True, "1"), line(False, "1"), line(False, "1"), line(False, "1")],
    ]
    for stakes in pools:
        for outcome in (True, False):
            plan = compute_payouts(stakes, outcome)
            assert plan.total_payout == plan.total_pool
            assert all(p.amount == p.amount.quantize(Decimal("0.01")) for p in plan.payouts)


def test_nobody_on_winning_side_refunds_every_stake() -> None:
    stakes = [line(True, "20"), line(True, "35.25")]

    plan = compute_payouts(stakes, outcome=False)

    assert plan.policy == REFUND
    assert all(p.is_refund for p in plan.payouts)
    assert sorted(p.amount for p in plan.payouts) == [Decimal("20"), Decimal("35.25")]
    assert plan.total_payout == Decimal("55.25")
    assert plan.winners_count == 0


def test_empty_pool_pays_nothing() -> None:
    plan = compute_payouts([], outcome=True)

    assert plan.policy == EMPTY
    assert plan.payouts == []
    assert plan.total_payout == Decimal("0")


def test_payout_multiplier() -> None:
    assert payout_multiplier(Decimal("300"), Decimal("400")) == pytest.approx(4 / 3)
    assert payout_multiplier(Decimal("100"), Decimal("400")) == 4.0
    assert payout_multiplier(Decimal("0"), Decimal("400")) is None
