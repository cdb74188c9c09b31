"""Database models module."""

from prophet.models.appeal import Appeal
from prophet.models.bet import Bet
from prophet.models.credit_transaction import CreditTransaction
from prophet.models.decision import ArbitratorDecision
from prophet.models.market import Market
from prophet.models.participant import Participant
from prophet.models.user import User

__all__ = [
    "Appeal",
    "ArbitratorDecision",
    "Bet",
    "CreditTransaction",
    "Market",
    "Participant",
    "User",
]
