"""
Payout Calculator

Splits a bet's pool among the participants once the outcome is known.

Formulas:
- Winning stake: payout = stake * total_pool / winning_total
- Losing stake: payout = 0
- Nobody on the winning side: every participant gets their stake back
- Empty pool: nothing to pay

Rounding: shares are floored to the cent and the leftover cents go one
each to the winners with the largest discarded remainder (ties broken by
earliest stake, then participant id). Payouts always sum to total_pool.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, Optional, Sequence
from uuid import UUID

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

PROPORTIONAL = "proportional"
REFUND = "refund"
EMPTY = "empty"


@dataclass(frozen=True)
class StakeLine:
    """One participant's stake as seen by the calculator."""

    participant_id: UUID
    user_id: UUID
    prediction: bool
    stake_amount: Decimal
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Payout:
    participant_id: UUID
    user_id: UUID
    amount: Decimal
    is_refund: bool = False


@dataclass
class PayoutPlan:
    outcome: bool
    policy: str
    total_pool: Decimal
    winning_total: Decimal
    payouts: list[Payout] = field(default_factory=list)

    @property
    def total_payout(self) -> Decimal:
        return sum((p.amount for p in self.payouts), ZERO)

    @property
    def winners_count(self) -> int:
        return sum(1 for p in self.payouts if not p.is_refund and p.amount > 0)


def side_totals(stakes: Iterable[StakeLine]) -> tuple[Decimal, Decimal]:
    """Return (yes_amount, no_amount)."""
    yes_amount = ZERO
    no_amount = ZERO
    for stake in stakes:
        if stake.prediction:
            yes_amount += stake.stake_amount
        else:
            no_amount += stake.stake_amount
    return yes_amount, no_amount


def payout_multiplier(side_amount: Decimal, total_pool: Decimal) -> Optional[float]:
    """Credits returned per credit staked on a side, None while that side is empty."""
    if side_amount <= 0:
        return None
    return float(total_pool / side_amount)


def compute_payouts(stakes: Sequence[StakeLine], outcome: bool) -> PayoutPlan:
    """Build the payout plan for a bet resolved with ``outcome``."""
    yes_amount, no_amount = side_totals(stakes)
    total_pool = yes_amount + no_amount
    winning_total = yes_amount if outcome else no_amount

    if total_pool <= 0:
        return PayoutPlan(
            outcome=outcome,
            policy=EMPTY,
            total_pool=ZERO,
            winning_total=ZERO,
        )

    if winning_total <= 0:
        return PayoutPlan(
            outcome=outcome,
            policy=REFUND,
            total_pool=total_pool,
            winning_total=ZERO,
            payouts=[
                Payout(s.participant_id, s.user_id, s.stake_amount, is_refund=True)
                for s in stakes
            ],
        )

    winners = [s for s in stakes if s.prediction == outcome]
    shares = []
    for stake in winners:
        exact = stake.stake_amount * total_pool / winning_total
        floored = exact.quantize(CENT, rounding=ROUND_DOWN)
        shares.append([stake, floored, exact - floored])

    leftover_cents = int((total_pool - sum(s[1] for s in shares)) / CENT)
    ranked = sorted(
        shares,
        key=lambda s: (-s[2], _sort_time(s[0].created_at), str(s[0].participant_id)),
    )
    for entry in ranked[:leftover_cents]:
        entry[1] += CENT

    return PayoutPlan(
        outcome=outcome,
        policy=PROPORTIONAL,
        total_pool=total_pool,
        winning_total=winning_total,
        payouts=[Payout(s.participant_id, s.user_id, amount) for s, amount, _ in shares],
    )


def _sort_time(created_at: Optional[datetime]) -> float:
    # Missing timestamps sort last
    if created_at is None:
        return float("inf")
    return created_at.timestamp()
