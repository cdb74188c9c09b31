"""Arbitrator agent: decides the outcome of AI-arbitrated bets."""

from .main import (
    Judge,
    LLMJudge,
    PlaceholderJudge,
    get_arbitrator_agent,
    get_judge,
)
from .models import ArbitrationVerdict, BetQuestion

__all__ = [
    "ArbitrationVerdict",
    "BetQuestion",
    "Judge",
    "LLMJudge",
    "PlaceholderJudge",
    "get_arbitrator_agent",
    "get_judge",
]
