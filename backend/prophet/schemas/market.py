"""Market Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from prophet.schemas.common import BaseSchema, Credits, Pagination


class MarketType(str, Enum):
    """Market type enum."""

    BINARY = "binary"
    MULTIPLE_CHOICE = "multiple_choice"
    NUMERIC = "numeric"


class MarketSort(str, Enum):
    CREATED_AT = "created_at"
    NAME = "name"


class MarketCreate(BaseSchema):
    """Market creation schema."""

    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category: str = Field(min_length=1, max_length=100)
    type: MarketType = MarketType.BINARY


class MarketResponse(BaseSchema):
    """Market response schema."""

    id: UUID
    name: str
    description: Optional[str]
    category: Optional[str]
    type: MarketType
    is_active: bool
    created_at: datetime


class MarketListItem(MarketResponse):
    """Market with aggregated bet stats."""

    total_bets: int
    total_pool: Credits


class MarketListResponse(BaseSchema):
    markets: List[MarketListItem]
    pagination: Pagination


class MarketCreatedResponse(BaseSchema):
    success: bool = True
    market: MarketResponse
