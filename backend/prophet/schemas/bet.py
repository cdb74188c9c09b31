"""Bet, stake and resolution Pydantic schemas."""

import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import Field, StrictBool, ValidationInfo, field_validator

from prophet.schemas.common import BaseSchema, Credits, Pagination, UserSummary
from prophet.utils.time_utils import as_utc, utc_now

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ArbitratorType(str, Enum):
    """Who decides the outcome."""

    CREATOR = "creator"
    FRIEND = "friend"
    AI = "ai"


class BetStatusFilter(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    EXPIRED = "expired"
    ALL = "all"


class BetSort(str, Enum):
    CREATED_AT = "created_at"
    DEADLINE = "deadline"
    TOTAL_POOL = "total_pool"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PayoutPolicy(str, Enum):
    """How a resolved pool was distributed."""

    PROPORTIONAL = "proportional"
    REFUND = "refund"
    EMPTY = "empty"


# ============================================================================
# Requests
# ============================================================================


class BetCreate(BaseSchema):
    """Bet creation schema."""

    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=1000)
    deadline: datetime
    arbitrator_type: ArbitratorType
    arbitrator_email: Optional[str] = Field(default=None, validate_default=True)
    minimum_stake: Decimal = Field(
        default=Decimal("10.00"), gt=0, max_digits=15, decimal_places=2
    )
    market_id: Optional[UUID] = None

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, v: datetime) -> datetime:
        v = as_utc(v)
        if v <= utc_now():
            raise ValueError("deadline must be in the future")
        return v

    @field_validator("arbitrator_email")
    @classmethod
    def email_iff_friend(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        """Friend arbitration needs a valid email; other types never store one."""
        if info.data.get("arbitrator_type") != ArbitratorType.FRIEND:
            return None
        if not v:
            raise ValueError("Arbitrator email is required for friend arbitration")
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("arbitrator_email must be a valid email")
        return v


class StakeCreate(BaseSchema):
    """Stake placement schema."""

    prediction: StrictBool
    stake_amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)


class ResolveRequest(BaseSchema):
    """Manual resolution by the creator or friend arbitrator."""

    outcome: StrictBool
    reasoning: Optional[str] = Field(default=None, max_length=2000)


# ============================================================================
# Responses
# ============================================================================


class BetCreatedResponse(BaseSchema):
    success: bool = True
    bet_id: UUID
    market_id: Optional[UUID] = None


class MarketBrief(BaseSchema):
    id: UUID
    name: str
    category: Optional[str] = None


class Participation(BaseSchema):
    prediction: bool
    stake_amount: Credits


class BetSummary(BaseSchema):
    """Bet list item."""

    id: UUID
    title: str
    description: Optional[str]
    creator: UserSummary
    market: Optional[MarketBrief]
    deadline: datetime
    arbitrator_type: ArbitratorType
    resolved: bool
    outcome: Optional[bool]
    participant_count: int
    total_pool: Credits
    user_participation: Optional[Participation]
    created_at: datetime


class BetListResponse(BaseSchema):
    bets: List[BetSummary]
    pagination: Pagination


class BetInfo(BaseSchema):
    id: UUID
    title: str
    description: Optional[str]
    creator: UserSummary
    market: Optional[MarketBrief]
    deadline: datetime
    arbitrator_type: ArbitratorType
    arbitrator_email: Optional[str]
    minimum_stake: Credits
    resolved: bool
    outcome: Optional[bool]
    resolved_at: Optional[datetime]
    total_pool: Credits
    created_at: datetime


class ParticipantResponse(BaseSchema):
    id: UUID
    user: UserSummary
    prediction: bool
    stake_amount: Credits
    created_at: datetime


class DecisionResponse(BaseSchema):
    id: UUID
    arbitrator: Optional[UserSummary]
    outcome: bool
    reasoning: Optional[str]
    is_ai_decision: bool
    payout_policy: PayoutPolicy
    total_payout: Credits
    winners_count: int
    appeal_count: int
    decided_at: datetime


class BetStats(BaseSchema):
    total_participants: int
    yes_count: int
    no_count: int
    yes_amount: Credits
    no_amount: Credits
    # None when nobody has staked on that side yet
    potential_payout_yes: Optional[float]
    potential_payout_no: Optional[float]


class BetDetailResponse(BaseSchema):
    bet: BetInfo
    participants: List[ParticipantResponse]
    decision: Optional[DecisionResponse]
    user_participation: Optional[Participation]
    stats: BetStats


class StakeResponse(BaseSchema):
    success: bool = True
    participant_id: UUID
    new_balance: Credits


class ResolutionResponse(BaseSchema):
    success: bool = True
    decision_id: UUID
    total_payout: Credits
    winners_count: int
    payout_policy: PayoutPolicy


class AIArbitrationResponse(ResolutionResponse):
    ai_decision: bool
    reasoning: str
