"""Bet database model."""

from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import TimestampMixin, UUIDMixin

ARBITRATOR_TYPES = ("creator", "friend", "ai")


class Bet(Base, UUIDMixin, TimestampMixin):
    """Binary-outcome proposition open for staking until its deadline."""

    __tablename__ = "bets"

    # Foreign keys
    creator_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    market_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("markets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Proposition
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=False)

    # Arbitration
    arbitrator_type = Column(String(10), nullable=False)
    arbitrator_email = Column(String(320), nullable=True)

    # Staking
    minimum_stake = Column(Numeric(15, 2), nullable=False, default=Decimal("10.00"))
    total_pool = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    # Resolution
    resolved = Column(Boolean, nullable=False, default=False)
    outcome = Column(Boolean, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    creator = relationship("User", foreign_keys=[creator_id])
    market = relationship("Market", back_populates="bets")
    participants = relationship(
        "Participant",
        back_populates="bet",
        order_by="Participant.created_at",
    )
    decision = relationship("ArbitratorDecision", back_populates="bet", uselist=False)
    appeals = relationship("Appeal", back_populates="bet")

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "arbitrator_type IN ('creator', 'friend', 'ai')",
            name="valid_arbitrator_type",
        ),
        CheckConstraint(
            "(arbitrator_type = 'friend') = (arbitrator_email IS NOT NULL)",
            name="arbitrator_email_iff_friend",
        ),
        CheckConstraint(
            "(resolved AND outcome IS NOT NULL AND resolved_at IS NOT NULL) OR "
            "(NOT resolved AND outcome IS NULL AND resolved_at IS NULL)",
            name="outcome_iff_resolved",
        ),
        CheckConstraint("minimum_stake > 0", name="positive_minimum_stake"),
        CheckConstraint("total_pool >= 0", name="non_negative_pool"),
        Index("idx_bets_resolved_deadline", "resolved", "deadline"),
    )

    def __repr__(self) -> str:
        return f"<Bet {self.title!r} pool={self.total_pool}>"
