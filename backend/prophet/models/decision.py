"""Arbitrator decision database model."""

from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import UUIDMixin

PAYOUT_POLICIES = ("proportional", "refund", "empty")


class ArbitratorDecision(Base, UUIDMixin):
    """Final outcome of a bet. Exactly one per resolved bet."""

    __tablename__ = "arbitrator_decisions"

    bet_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bets.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    # NULL for AI decisions
    arbitrator_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    outcome = Column(Boolean, nullable=False)
    reasoning = Column(Text, nullable=True)
    is_ai_decision = Column(Boolean, nullable=False, default=False)

    # Settlement metrics
    payout_policy = Column(String(20), nullable=False)
    total_payout = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    winners_count = Column(Integer, nullable=False, default=0)
    appeal_count = Column(Integer, nullable=False, default=0)

    decided_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    bet = relationship("Bet", back_populates="decision")
    arbitrator = relationship("User", foreign_keys=[arbitrator_id])

    __table_args__ = (
        CheckConstraint(
            "payout_policy IN ('proportional', 'refund', 'empty')",
            name="valid_payout_policy",
        ),
    )

    def __repr__(self) -> str:
        return f"<ArbitratorDecision {'YES' if self.outcome else 'NO'} for bet {self.bet_id}>"
