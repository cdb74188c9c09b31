"""Credit ledger database model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from prophet.database.base import Base
from prophet.models.base import UUIDMixin

TRANSACTION_TYPES = ("signup_bonus", "stake", "payout", "refund")


class CreditTransaction(Base, UUIDMixin):
    """Append-only ledger entry. A user's balance is the sum of their amounts."""

    __tablename__ = "credit_transactions"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bet_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    amount = Column(Numeric(15, 2), nullable=False)
    type = Column(String(20), nullable=False)
    description = Column(String(500), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    user = relationship("User", back_populates="transactions")

    __table_args__ = (
        CheckConstraint(
            "type IN ('signup_bonus', 'stake', 'payout', 'refund')",
            name="valid_transaction_type",
        ),
        CheckConstraint("amount <> 0", name="non_zero_amount"),
        Index("idx_credit_transactions_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CreditTransaction {self.type} {self.amount}>"
