"""Appeal database model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import TimestampMixin, UUIDMixin

APPEAL_STATUSES = ("pending", "upheld", "overturned", "dismissed")


class Appeal(Base, UUIDMixin, TimestampMixin):
    """Participant's contest of an AI arbitrator decision."""

    __tablename__ = "appeals"

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

    reason = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending")

    bet = relationship("Bet", back_populates="appeals")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("bet_id", "user_id", name="one_appeal_per_user"),
        CheckConstraint(
            "status IN ('pending', 'upheld', 'overturned', 'dismissed')",
            name="valid_appeal_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Appeal {self.status} on bet {self.bet_id}>"
