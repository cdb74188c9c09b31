"""Bet API routes: registry, staking and resolution."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prophet.api.dependencies import (
    PageParams,
    get_current_user,
    get_optional_user,
    get_page_params,
    get_requester,
)
from prophet.database.dependencies import get_db
from prophet.models import Bet, User
from prophet.schemas import (
    AIArbitrationResponse,
    ArbitratorType,
    BetCreate,
    BetCreatedResponse,
    BetDetailResponse,
    BetListResponse,
    BetSort,
    BetStatusFilter,
    BetSummary,
    Pagination,
    ResolutionResponse,
    ResolveRequest,
    SortOrder,
    StakeCreate,
    StakeResponse,
)
from prophet.schemas.bet import (
    BetInfo,
    BetStats,
    DecisionResponse,
    MarketBrief,
    ParticipantResponse,
    Participation,
)
from prophet.schemas.common import UserSummary
from prophet.services import (
    Requester,
    arbitration_service,
    bet_service,
    resolution_service,
    staking_service,
)

router = APIRouter(prefix="/bets", tags=["Bets"])


def _participation_of(bet: Bet, user: Optional[User]) -> Optional[Participation]:
    if user is None:
        return None
    for participant in bet.participants:
        if participant.user_id == user.id:
            return Participation.model_validate(participant)
    return None


@router.get("", response_model=BetListResponse)
async def list_bets(
    status_filter: BetStatusFilter = Query(default=BetStatusFilter.ALL, alias="status"),
    category: Optional[str] = None,
    search: Optional[str] = None,
    creator_id: Optional[UUID] = None,
    arbitrator_type: Optional[ArbitratorType] = None,
    sort: BetSort = BetSort.CREATED_AT,
    order: SortOrder = SortOrder.DESC,
    paging: PageParams = Depends(get_page_params),
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """List bets with filters, sorting and pagination."""
    bets, total = await bet_service.list_bets(
        db,
        page=paging.page,
        limit=paging.limit,
        status=status_filter.value,
        category=category,
        search=search,
        creator_id=creator_id,
        arbitrator_type=arbitrator_type.value if arbitrator_type else None,
        sort=sort.value,
        ascending=order == SortOrder.ASC,
    )

    return BetListResponse(
        bets=[
            BetSummary(
                id=bet.id,
                title=bet.title,
                description=bet.description,
                creator=UserSummary.model_validate(bet.creator),
                market=MarketBrief.model_validate(bet.market) if bet.market else None,
                deadline=bet.deadline,
                arbitrator_type=bet.arbitrator_type,
                resolved=bet.resolved,
                outcome=bet.outcome,
                participant_count=len(bet.participants),
                total_pool=bet.total_pool,
                user_participation=_participation_of(bet, user),
                created_at=bet.created_at,
            )
            for bet in bets
        ],
        pagination=Pagination.build(total, paging.page, paging.limit),
    )


@router.post("", response_model=BetCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_bet(
    request: BetCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a bet."""
    bet = await bet_service.create_bet(db, user, request)
    return BetCreatedResponse(bet_id=bet.id, market_id=bet.market_id)


@router.get("/{bet_id}", response_model=BetDetailResponse)
async def get_bet(
    bet_id: UUID,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Bet detail with participants, decision and side statistics."""
    bet = await bet_service.get_bet_with_details(db, bet_id)
    participants = await bet_service.list_participants(db, bet_id, newest_first=True)
    stats = bet_service.calculate_stats(participants)

    user_participation = None
    if user is not None:
        mine = next((p for p in participants if p.user_id == user.id), None)
        if mine is not None:
            user_participation = Participation.model_validate(mine)

    return BetDetailResponse(
        bet=BetInfo.model_validate(bet),
        participants=[ParticipantResponse.model_validate(p) for p in participants],
        decision=DecisionResponse.model_validate(bet.decision) if bet.decision else None,
        user_participation=user_participation,
        stats=BetStats.model_validate(stats),
    )


@router.post(
    "/{bet_id}/stakes",
    response_model=StakeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def place_stake(
    bet_id: UUID,
    request: StakeCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Stake credits on YES or NO."""
    receipt = await staking_service.record_stake(
        db,
        bet_id=bet_id,
        user_id=user.id,
        prediction=request.prediction,
        amount=request.stake_amount,
    )
    return StakeResponse(participant_id=receipt.participant_id, new_balance=receipt.new_balance)


@router.post("/{bet_id}/resolve", response_model=ResolutionResponse)
async def resolve_bet(
    bet_id: UUID,
    request: ResolveRequest,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    """Resolve a creator- or friend-arbitrated bet."""
    result = await resolution_service.resolve_manually(
        db,
        bet_id=bet_id,
        requester=requester,
        outcome=request.outcome,
        reasoning=request.reasoning,
    )
    return ResolutionResponse(
        decision_id=result.decision_id,
        total_payout=result.total_payout,
        winners_count=result.winners_count,
        payout_policy=result.payout_policy,
    )


@router.post(
    "/{bet_id}/ai-arbitrate",
    response_model=AIArbitrationResponse,
    dependencies=[Depends(get_current_user)],
)
async def ai_arbitrate(
    bet_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Ask the AI arbitrator to settle a bet whose deadline has passed."""
    outcome = await arbitration_service.arbitrate(db, bet_id)
    return AIArbitrationResponse(
        decision_id=outcome.resolution.decision_id,
        total_payout=outcome.resolution.total_payout,
        winners_count=outcome.resolution.winners_count,
        payout_policy=outcome.resolution.payout_policy,
        ai_decision=outcome.verdict.decision,
        reasoning=outcome.verdict.reasoning,
    )
