"""Lazily built, settings-aware pydantic-ai agents."""

import logging
import os
from typing import Callable, Generic, TypeVar

from pydantic_ai import Agent

from prophet.config import ArbitrationConfig, get_settings

logger = logging.getLogger(__name__)

DepsT = TypeVar("DepsT")
OutputT = TypeVar("OutputT")


class AgentFactory(Generic[DepsT, OutputT]):
    """
    Caches one agent for the configured arbitration model.

    The agent is rebuilt when ``arbitration.model`` changes, so reloading
    settings switches models without restarting the process.
    """

    def __init__(self, create_fn: Callable[[], Agent[DepsT, OutputT]]):
        self._create_fn = create_fn
        self._agent: Agent[DepsT, OutputT] | None = None
        self._model_name: str | None = None

    def get_agent(self) -> Agent[DepsT, OutputT]:
        config = get_settings().arbitration
        if self._agent is None or config.model != self._model_name:
            _export_provider_key(config)
            self._agent = self._create_fn()
            self._model_name = config.model
            logger.info(f"Built agent {self._agent.name or 'unnamed'} on {config.model}")
        return self._agent

    def reset(self) -> None:
        self._agent = None
        self._model_name = None


def _export_provider_key(config: ArbitrationConfig) -> None:
    # pydantic-ai's OpenAI provider only looks at the environment
    if config.openai_api_key:
        os.environ["OPENAI_API_KEY"] = config.openai_api_key
