"""Market API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.api.dependencies import PageParams, get_current_user, get_page_params
from prophet.database.dependencies import get_db
from prophet.models import User
from prophet.schemas import (
    MarketCreate,
    MarketCreatedResponse,
    MarketListItem,
    MarketListResponse,
    MarketResponse,
    MarketSort,
    Pagination,
    SortOrder,
)
from prophet.services import market_service

router = APIRouter(prefix="/markets", tags=["Markets"])


@router.get("", response_model=MarketListResponse)
async def list_markets(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: MarketSort = MarketSort.CREATED_AT,
    order: SortOrder = SortOrder.DESC,
    paging: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
):
    """List active markets with bet counts and pooled credits."""
    rows, total = await market_service.list_markets(
        db,
        page=paging.page,
        limit=paging.limit,
        category=category,
        search=search,
        sort=sort.value,
        ascending=order == SortOrder.ASC,
    )
    return MarketListResponse(
        markets=[
            MarketListItem(
                **MarketResponse.model_validate(market).model_dump(),
                total_bets=total_bets,
                total_pool=total_pool,
            )
            for market, total_bets, total_pool in rows
        ],
        pagination=Pagination.build(total, paging.page, paging.limit),
    )


@router.post("", response_model=MarketCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_market(
    request: MarketCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a market (admins only)."""
    market = await market_service.create_market(db, user, request)
    return MarketCreatedResponse(market=MarketResponse.model_validate(market))
