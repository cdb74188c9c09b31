"""
FastAPI dependencies for identity and pagination.

The upstream auth proxy verifies the session and forwards the identity as
``X-User-Id`` and ``X-User-Email`` headers.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.config import get_settings
from prophet.database.dependencies import get_db
from prophet.errors import AuthenticationRequired
from prophet.models import User
from prophet.schemas.bet import EMAIL_PATTERN
from prophet.services import Requester, ledger_service


@dataclass
class PageParams:
    page: int
    limit: int


def _parse_identity(user_id: Optional[str], email: Optional[str]) -> tuple[UUID, str]:
    if not user_id or not email:
        raise AuthenticationRequired()
    try:
        parsed_id = UUID(user_id)
    except ValueError:
        raise AuthenticationRequired("Malformed user id")
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise AuthenticationRequired("Malformed user email")
    return parsed_id, email


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller, registering them on first sight."""
    user_id, email = _parse_identity(x_user_id, x_user_email)
    return await ledger_service.ensure_user(db, user_id, email)


async def get_optional_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None."""
    if x_user_id is None and x_user_email is None:
        return None
    user_id, email = _parse_identity(x_user_id, x_user_email)
    return await ledger_service.ensure_user(db, user_id, email)


async def get_requester(
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    user: User = Depends(get_current_user),
) -> Requester:
    """
    The caller as verified on this request, for authority checks.

    The email comes from the header, not the stored row.
    """
    _, email = _parse_identity(x_user_id, x_user_email)
    return Requester(user_id=user.id, email=email)


def get_page_params(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
) -> PageParams:
    """Page number and a page size clamped to the configured maximum."""
    config = get_settings().pagination
    return PageParams(page=page, limit=min(limit or config.default_limit, config.max_limit))
