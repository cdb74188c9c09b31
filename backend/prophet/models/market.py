"""Market database model."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import TimestampMixin, UUIDMixin

MARKET_TYPES = ("binary", "multiple_choice", "numeric")


class Market(Base, UUIDMixin, TimestampMixin):
    """Topic grouping for bets."""

    __tablename__ = "markets"

    name = Column(String(200), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    type = Column(String(20), nullable=False, default="binary")
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    bets = relationship("Bet", back_populates="market")

    __table_args__ = (
        CheckConstraint(
            "type IN ('binary', 'multiple_choice', 'numeric')",
            name="valid_market_type",
        ),
    )

    def __repr__(self) -> str:
        return f"<Market {self.name}>"
