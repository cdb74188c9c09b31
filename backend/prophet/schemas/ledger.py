"""Credit ledger Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from prophet.schemas.common import BaseSchema, Credits


class TransactionType(str, Enum):
    SIGNUP_BONUS = "signup_bonus"
    STAKE = "stake"
    PAYOUT = "payout"
    REFUND = "refund"


class TransactionResponse(BaseSchema):
    id: UUID
    amount: Credits
    type: TransactionType
    description: Optional[str]
    bet_id: Optional[UUID]
    created_at: datetime


class BalanceStats(BaseSchema):
    total_transactions: int
    active_bets_count: int


class BalanceResponse(BaseSchema):
    success: bool = True
    balance: Credits
    recent_transactions: List[TransactionResponse]
    stats: BalanceStats
