"""API routes module."""

from prophet.api.routes.appeals import router as appeals_router
from prophet.api.routes.bets import router as bets_router
from prophet.api.routes.markets import router as markets_router
from prophet.api.routes.users import router as users_router

__all__ = [
    "appeals_router",
    "bets_router",
    "markets_router",
    "users_router",
]
