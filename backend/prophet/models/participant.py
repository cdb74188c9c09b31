"""Participant (stake) database model."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import UUIDMixin


class Participant(Base, UUIDMixin):
    """A user's single stake on one side of a bet."""

    __tablename__ = "bet_participants"

    bet_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    prediction = Column(Boolean, nullable=False)
    stake_amount = Column(Numeric(15, 2), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    bet = relationship("Bet", back_populates="participants")
    user = relationship("User", back_populates="participations")

    __table_args__ = (
        UniqueConstraint("bet_id", "user_id", name="one_stake_per_user"),
        CheckConstraint("stake_amount > 0", name="positive_stake"),
    )

    def __repr__(self) -> str:
        side = "YES" if self.prediction else "NO"
        return f"<Participant {side} {self.stake_amount}>"
