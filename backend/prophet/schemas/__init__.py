"""Pydantic request/response schemas."""

from prophet.schemas.appeal import (
    AppealCreate,
    AppealCreatedResponse,
    AppealListItem,
    AppealListResponse,
    AppealResponse,
    AppealStatus,
)
from prophet.schemas.bet import (
    AIArbitrationResponse,
    ArbitratorType,
    BetCreate,
    BetCreatedResponse,
    BetDetailResponse,
    BetListResponse,
    BetSort,
    BetStatusFilter,
    BetSummary,
    PayoutPolicy,
    ResolutionResponse,
    ResolveRequest,
    SortOrder,
    StakeCreate,
    StakeResponse,
)
from prophet.schemas.common import (
    BaseSchema,
    Credits,
    ErrorResponse,
    Pagination,
    UserSummary,
    ValidationErrorItem,
)
from prophet.schemas.ledger import (
    BalanceResponse,
    TransactionResponse,
    TransactionType,
)
from prophet.schemas.market import (
    MarketCreate,
    MarketCreatedResponse,
    MarketListItem,
    MarketListResponse,
    MarketResponse,
    MarketSort,
    MarketType,
)

__all__ = [
    "AIArbitrationResponse",
    "AppealCreate",
    "AppealCreatedResponse",
    "AppealListItem",
    "AppealListResponse",
    "AppealResponse",
    "AppealStatus",
    "ArbitratorType",
    "BalanceResponse",
    "BaseSchema",
    "BetCreate",
    "BetCreatedResponse",
    "BetDetailResponse",
    "BetListResponse",
    "BetSort",
    "BetStatusFilter",
    "BetSummary",
    "Credits",
    "ErrorResponse",
    "MarketCreate",
    "MarketCreatedResponse",
    "MarketListItem",
    "MarketListResponse",
    "MarketResponse",
    "MarketSort",
    "MarketType",
    "Pagination",
    "PayoutPolicy",
    "ResolutionResponse",
    "ResolveRequest",
    "SortOrder",
    "StakeCreate",
    "StakeResponse",
    "TransactionResponse",
    "TransactionType",
    "UserSummary",
    "ValidationErrorItem",
]
