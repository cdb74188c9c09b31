"""Common Pydantic schemas and base classes."""

from decimal import Decimal
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, PlainSerializer

# Credits stay Decimal in Python and go over the wire as JSON numbers
Credits = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class Pagination(BaseModel):
    """Pagination metadata for list responses."""

    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=(total + limit - 1) // limit if limit else 0,
        )


class UserSummary(BaseSchema):
    """Public view of a user."""

    id: UUID
    username: Optional[str] = None
    full_name: Optional[str] = None


class ValidationErrorItem(BaseModel):
    """Single field validation failure."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
    code: Optional[str] = None
    validation_errors: Optional[List[ValidationErrorItem]] = None
