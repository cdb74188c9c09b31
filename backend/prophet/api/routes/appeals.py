"""Appeal API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.api.dependencies import PageParams, get_current_user, get_page_params
from prophet.database.dependencies import get_db
from prophet.models import User
from prophet.schemas import (
    AppealCreate,
    AppealCreatedResponse,
    AppealListItem,
    AppealListResponse,
    AppealResponse,
    AppealStatus,
    Pagination,
)
from prophet.services import appeal_service

router = APIRouter(prefix="/appeals", tags=["Appeals"])


@router.get("", response_model=AppealListResponse)
async def list_appeals(
    status_filter: Optional[AppealStatus] = Query(default=None, alias="status"),
    paging: PageParams = Depends(get_page_params),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's appeals, newest first."""
    appeals, total = await appeal_service.list_appeals(
        db,
        user_id=user.id,
        page=paging.page,
        limit=paging.limit,
        status=status_filter.value if status_filter else None,
    )
    return AppealListResponse(
        appeals=[AppealListItem.model_validate(appeal) for appeal in appeals],
        pagination=Pagination.build(total, paging.page, paging.limit),
    )


@router.post("", response_model=AppealCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_appeal(
    request: AppealCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Contest an AI decision on a bet the caller staked on."""
    appeal = await appeal_service.create_appeal(
        db,
        user_id=user.id,
        bet_id=request.bet_id,
        reason=request.reason,
    )
    return AppealCreatedResponse(appeal=AppealResponse.model_validate(appeal))
