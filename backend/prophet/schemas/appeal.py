"""Appeal Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from prophet.config import get_settings
from prophet.schemas.common import BaseSchema, Pagination


class AppealStatus(str, Enum):
    PENDING = "pending"
    UPHELD = "upheld"
    OVERTURNED = "overturned"
    DISMISSED = "dismissed"


class AppealCreate(BaseSchema):
    """Appeal creation schema."""

    bet_id: UUID
    reason: str = Field(min_length=1)

    @field_validator("reason")
    @classmethod
    def reason_length(cls, v: str) -> str:
        rules = get_settings().appeals
        if len(v) < rules.reason_min_length:
            raise ValueError(f"reason must be at least {rules.reason_min_length} characters")
        if len(v) > rules.reason_max_length:
            raise ValueError(f"reason must be no more than {rules.reason_max_length} characters")
        return v


class AppealBetBrief(BaseSchema):
    id: UUID
    title: str
    resolved: bool
    outcome: Optional[bool]


class AppealResponse(BaseSchema):
    id: UUID
    bet_id: UUID
    user_id: UUID
    reason: str
    status: AppealStatus
    created_at: datetime


class AppealListItem(AppealResponse):
    bet: AppealBetBrief


class AppealCreatedResponse(BaseSchema):
    success: bool = True
    appeal: AppealResponse


class AppealListResponse(BaseSchema):
    success: bool = True
    appeals: List[AppealListItem]
    pagination: Pagination
