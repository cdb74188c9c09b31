"""Data models for the Arbitrator agent."""

from datetime import datetime

from pydantic import BaseModel, Field


class BetQuestion(BaseModel):
    """The proposition the arbitrator is asked to settle."""

    title: str
    description: str | None = None
    deadline: datetime


class ArbitrationVerdict(BaseModel):
    """Structured output of the Arbitrator agent."""

    decision: bool = Field(
        description="True if the bet resolves YES, False if it resolves NO.",
    )
    reasoning: str = Field(
        description="Brief, factual explanation of the decision.",
    )
