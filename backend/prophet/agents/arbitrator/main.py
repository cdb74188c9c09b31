"""Arbitrator Agent: LLM judge for AI-arbitrated bets."""

from __future__ import annotations

import logging
import random
from typing import Protocol

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from prophet.agents.agent_factory import AgentFactory
from prophet.config import Settings, get_settings

from .models import ArbitrationVerdict, BetQuestion
from .prompts import ARBITRATOR_SYSTEM_PROMPT, build_arbitration_prompt

logger = logging.getLogger(__name__)


class Judge(Protocol):
    """Anything that can settle a bet question."""

    async def judge(self, question: BetQuestion) -> ArbitrationVerdict: ...


def _create_arbitrator_agent(
    model: Model | str | None = None,
    settings: Settings | None = None,
) -> Agent[None, ArbitrationVerdict]:
    """Create the Arbitrator agent with a structured verdict output."""
    settings = settings or get_settings()
    return Agent(
        model=model or settings.arbitration.model,
        output_type=ArbitrationVerdict,
        system_prompt=ARBITRATOR_SYSTEM_PROMPT,
        model_settings=ModelSettings(temperature=settings.arbitration.temperature),
        name="arbitrator",
    )


_arbitrator_factory = AgentFactory(create_fn=_create_arbitrator_agent)


def get_arbitrator_agent() -> Agent[None, ArbitrationVerdict]:
    """Get the singleton Arbitrator agent instance."""
    return _arbitrator_factory.get_agent()


class LLMJudge:
    """
    Asks the Arbitrator agent for a verdict.

    With no ``model`` the shared agent built from settings is used; passing
    a model (for example ``pydantic_ai.models.test.TestModel``) builds a
    private agent around it.
    """

    def __init__(self, model: Model | str | None = None):
        self._agent = _create_arbitrator_agent(model) if model is not None else None

    @property
    def agent(self) -> Agent[None, ArbitrationVerdict]:
        return self._agent or get_arbitrator_agent()

    async def judge(self, question: BetQuestion) -> ArbitrationVerdict:
        result = await self.agent.run(build_arbitration_prompt(question))
        verdict = result.output
        logger.info(
            f"Arbitrator decided {'YES' if verdict.decision else 'NO'} for {question.title!r}"
        )
        return verdict


class PlaceholderJudge:
    """Coin-flip judge for development and staging environments."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    async def judge(self, question: BetQuestion) -> ArbitrationVerdict:
        decision = self._rng.random() > 0.5
        return ArbitrationVerdict(
            decision=decision,
            reasoning=(
                "AI Decision (placeholder): outcome drawn at random. "
                "No language model was consulted."
            ),
        )


def get_judge(settings: Settings | None = None) -> Judge:
    """Pick the judge for the running environment."""
    settings = settings or get_settings()
    if not settings.is_production and settings.arbitration.placeholder_outside_production:
        logger.debug(f"Using placeholder judge in {settings.environment}")
        return PlaceholderJudge()
    return LLMJudge()
