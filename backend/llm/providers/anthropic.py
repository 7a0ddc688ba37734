"""Anthropic LLM provider.

The Messages API differs from the OpenAI shape in three ways that matter
here:
  - the persona prompt goes in ``system``, not in the message list
  - the conversation must open with a user turn and alternate roles
  - no frequency/presence penalties, and temperature and top_p may not be
    combined on current models, so only temperature is sent
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from .base import LLMProvider, SamplingParams

logger = logging.getLogger(__name__)


def to_anthropic_messages(messages: list[dict]) -> tuple[str, list[dict]]:
    """Return ``(system, turns)`` for the Messages API.

    History is trimmed by turn count, so it can start on an assistant turn;
    leading assistant turns are dropped and same-role neighbours merged.
    """
    system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
    turns: list[dict] = []
    for m in messages:
        if m["role"] == "system" or (not turns and m["role"] != "user"):
            continue
        if turns and turns[-1]["role"] == m["role"]:
            turns[-1] = {"role": m["role"], "content": f"{turns[-1]['content']}\n\n{m['content']}"}
        else:
            turns.append({"role": m["role"], "content": m["content"]})
    return system, turns


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API (async client)."""

    DEFAULT_MODEL = "claude-3-5-haiku-latest"

    def __init__(self, api_key: str, model: str = ""):
        from anthropic import AsyncAnthropic  # type: ignore[import-untyped]

        self._client = AsyncAnthropic(api_key=api_key)
        self._model = model or self.DEFAULT_MODEL
        logger.info(f"Anthropic provider ready (model={self._model})")

    @property
    def name(self) -> str:
        return "anthropic"

    async def stream_text_deltas(
        self,
        messages: list[dict],
        params: SamplingParams,
    ) -> AsyncIterator[str]:
        system, turns = to_anthropic_messages(messages)
        request: dict = {
            "model": self._model,
            "messages": turns,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
        }
        if system:
            request["system"] = system

        async with self._client.messages.stream(**request) as stream:
            async for text in stream.text_stream:
                yield text
