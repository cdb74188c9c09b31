"""Business logic services."""

from prophet.services.appeal_service import AppealService, appeal_service
from prophet.services.arbitration_service import ArbitrationService, arbitration_service
from prophet.services.bet_service import BetService, bet_service
from prophet.services.ledger_service import LedgerService, ledger_service
from prophet.services.market_service import MarketService, market_service
from prophet.services.resolution_service import (
    Requester,
    ResolutionService,
    resolution_service,
)
from prophet.services.staking_service import StakingService, staking_service

__all__ = [
    "AppealService",
    "ArbitrationService",
    "BetService",
    "LedgerService",
    "MarketService",
    "Requester",
    "ResolutionService",
    "StakingService",
    "appeal_service",
    "arbitration_service",
    "bet_service",
    "ledger_service",
    "market_service",
    "resolution_service",
    "staking_service",
]
