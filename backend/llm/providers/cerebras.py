"""Cerebras LLM provider."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from .base import LLMProvider, SamplingParams

logger = logging.getLogger(__name__)


class CerebrasProvider(LLMProvider):
    """Cerebras Cloud SDK — fast inference, OpenAI-compatible API."""

    DEFAULT_MODEL = "llama3.1-8b"

    def __init__(self, api_key: str, model: str = ""):
        from cerebras.cloud.sdk import AsyncCerebras

        self._client = AsyncCerebras(api_key=api_key)
        self._model = model or self.DEFAULT_MODEL
        logger.info(f"Cerebras provider ready (model={self._model})")

    @property
    def name(self) -> str:
        return "cerebras"

    async def stream_text_deltas(
        self,
        messages: list[dict],
        params: SamplingParams,
    ) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=params.temperature,
            top_p=params.top_p,
            max_tokens=params.max_tokens,
            frequency_penalty=params.frequency_penalty,
            presence_penalty=params.presence_penalty,
            stream=True,
        )
        async for chunk in stream:
            delta = chunk.choices[0].delta  # type: ignore[union-attr]
            if delta and delta.content:
                yield delta.content  # type: ignore[misc]
