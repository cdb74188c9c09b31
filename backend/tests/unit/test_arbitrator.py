"""
Unit Tests: AI Arbitrator

Test cases:
- LLM judge returns a structured verdict (TestModel, no network)
- Placeholder judge outside production
- Timeout and failure handling under each failure policy
- Agent cache follows the configured model
"""

import asyncio
import os
import random
from datetime import datetime, timezone

import pytest
from pydantic_ai import Agent
from pydantic_ai.models.test import TestModel

from prophet.agents.agent_factory import AgentFactory
from prophet.agents.arbitrator import (
    ArbitrationVerdict,
    BetQuestion,
    LLMJudge,
    PlaceholderJudge,
    get_judge,
)
from prophet.agents.arbitrator.prompts import build_arbitration_prompt
from prophet.config import Settings, get_settings
from prophet.errors import JudgmentUnavailable
from prophet.services.arbitration_service import ArbitrationService

QUESTION = BetQuestion(
    title="Will the city marathon be held on schedule?",
    description="Resolves YES if the race starts on the published date.",
    deadline=datetime(2026, 4, 12, 9, 0, tzinfo=timezone.utc),
)


class SlowJudge:
    async def judge(self, question: BetQuestion) -> ArbitrationVerdict:
        await asyncio.sleep(5)
        return ArbitrationVerdict(decision=True, reasoning="too late")


class BrokenJudge:
    async def judge(self, question: BetQuestion) -> ArbitrationVerdict:
        raise RuntimeError("model returned garbage")


def test_llm_judge_returns_structured_verdict() -> None:
    judge = LLMJudge(model=TestModel())

    verdict = asyncio.run(judge.judge(QUESTION))

    assert isinstance(verdict, ArbitrationVerdict)
    assert isinstance(verdict.decision, bool)
    assert isinstance(verdict.reasoning, str)


def test_prompt_carries_bet_details() -> None:
    prompt = build_arbitration_prompt(QUESTION)

    assert QUESTION.title in prompt
    assert QUESTION.description in prompt
    assert "2026-04-12T09:00:00+00:00" in prompt


def test_placeholder_judge_flips_a_coin() -> None:
    expected = random.Random(7).random() > 0.5

    verdict = asyncio.run(PlaceholderJudge(random.Random(7)).judge(QUESTION))

    assert verdict.decision is expected
    assert "placeholder" in verdict.reasoning


def test_placeholder_judge_used_outside_production() -> None:
    assert isinstance(get_judge(Settings(environment="development")), PlaceholderJudge)
    assert isinstance(get_judge(Settings(environment="production")), LLMJudge)


def test_placeholder_can_be_disabled_outside_production() -> None:
    settings = Settings(
        environment="staging",
        arbitration={"placeholder_outside_production": False},
    )

    assert isinstance(get_judge(settings), LLMJudge)


def test_timeout_defers_by_default(monkeypatch) -> None:
    monkeypatch.setenv("ARBITRATION__TIMEOUT_SECONDS", "0.05")
    get_settings.cache_clear()

    with pytest.raises(JudgmentUnavailable) as exc:
        asyncio.run(ArbitrationService().judge_outcome(QUESTION, SlowJudge()))

    assert exc.value.status_code == 503
    assert "timed out" in exc.value.message


def test_judge_error_defers_by_default() -> None:
    with pytest.raises(JudgmentUnavailable):
        asyncio.run(ArbitrationService().judge_outcome(QUESTION, BrokenJudge()))


def test_random_policy_falls_back_to_coin_flip(monkeypatch) -> None:
    monkeypatch.setenv("ARBITRATION__FAILURE_POLICY", "random")
    get_settings.cache_clear()
    expected = random.Random(3).random() > 0.5

    service = ArbitrationService(rng=random.Random(3))
    verdict = asyncio.run(service.judge_outcome(QUESTION, BrokenJudge()))

    assert verdict.decision is expected
    assert verdict.reasoning == "AI arbitration failed, random decision made as fallback"


def test_agent_rebuilt_when_model_setting_changes(monkeypatch) -> None:
    built = []

    def create() -> Agent:
        agent = Agent(TestModel(), name=f"probe-{len(built)}")
        built.append(agent)
        return agent

    factory = AgentFactory(create_fn=create)
    first = factory.get_agent()
    assert factory.get_agent() is first

    monkeypatch.setenv("ARBITRATION__MODEL", "openai:gpt-4o-mini")
    get_settings.cache_clear()

    assert factory.get_agent() is not first
    assert len(built) == 2


def test_agent_factory_exports_openai_key(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "unset")
    monkeypatch.setenv("ARBITRATION__OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()

    AgentFactory(create_fn=lambda: Agent(TestModel())).get_agent()

    assert os.environ["OPENAI_API_KEY"] == "sk-test"
