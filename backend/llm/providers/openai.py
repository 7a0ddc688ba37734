"""OpenAI LLM provider.

Also works with any OpenAI-compatible API (Azure OpenAI, vLLM, Ollama,
Together AI, etc.) — set LLM_BASE_URL to the custom endpoint.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from .base import LLMProvider, SamplingParams

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API (async client)."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(self, api_key: str, model: str = "", base_url: str = ""):
        from openai import AsyncOpenAI  # type: ignore[import-untyped]

        kwargs: dict = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = AsyncOpenAI(**kwargs)
        self._model = model or self.DEFAULT_MODEL
        logger.info(
            f"OpenAI provider ready (model={self._model}"
            f"{', base_url=' + base_url if base_url else ''})"
        )

    @property
    def name(self) -> str:
        return "openai"

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
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta and delta.content:
                yield delta.content
