"""User API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.api.dependencies import get_current_user
from prophet.database.dependencies import get_db
from prophet.models import User
from prophet.schemas import BalanceResponse, TransactionResponse
from prophet.schemas.ledger import BalanceStats
from prophet.services import ledger_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me/balance", response_model=BalanceResponse)
async def get_balance(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current balance folded from the ledger, plus recent activity."""
    balance = await ledger_service.get_balance(db, user.id)
    recent = await ledger_service.get_recent_transactions(db, user.id, limit=10)

    return BalanceResponse(
        balance=balance,
        recent_transactions=[TransactionResponse.model_validate(t) for t in recent],
        stats=BalanceStats(
            total_transactions=await ledger_service.count_transactions(db, user.id),
            active_bets_count=await ledger_service.count_active_bets(db, user.id),
        ),
    )
