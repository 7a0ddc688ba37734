"""LLM provider base class.

Every provider implements one async streaming method:
  - stream_text_deltas(messages, params)   (yields text delta strings)

To add a new provider:
  1. Create llm/providers/your_provider.py
  2. Subclass LLMProvider
  3. Register it in llm/providers/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator

from settings import settings


@dataclass(frozen=True)
class SamplingParams:
    """Sampling parameters for one completion request."""

    temperature: float = 0.2
    top_p: float = 0.1
    max_tokens: int = 256
    frequency_penalty: float = 0.5
    presence_penalty: float = 0.5

    @classmethod
    def from_settings(cls) -> SamplingParams:
        return cls(
            temperature=settings.LLM_TEMPERATURE,
            top_p=settings.LLM_TOP_P,
            max_tokens=settings.MAX_RESPONSE_TOKENS,
            frequency_penalty=settings.LLM_FREQUENCY_PENALTY,
            presence_penalty=settings.LLM_PRESENCE_PENALTY,
        )


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g. 'openai', 'anthropic')."""
        ...

    @abstractmethod
    def stream_text_deltas(
        self,
        messages: list[dict],
        params: SamplingParams,
    ) -> AsyncIterator[str]:
        """Send messages and yield text deltas as they arrive."""
        ...
