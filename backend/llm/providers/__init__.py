"""Dynamic LLM provider loader.

Maps LLM_PROVIDER to a provider constructor.  Provider SDKs are imported
lazily — only the selected provider's SDK needs to be installed.

Usage:
    from llm.providers import create_provider, provider_enabled
    if provider_enabled():
        provider = create_provider()
"""

from __future__ import annotations

import logging
from typing import Callable

from .base import LLMProvider, SamplingParams

logger = logging.getLogger(__name__)

__all__ = ["LLMProvider", "SamplingParams", "SUPPORTED", "create_provider", "provider_enabled"]

DISABLED = ("", "none", "off", "template")


def _openai(settings) -> LLMProvider:
    from .openai import OpenAIProvider

    return OpenAIProvider(settings.LLM_API_KEY, settings.LLM_MODEL, settings.LLM_BASE_URL)


def _anthropic(settings) -> LLMProvider:
    from .anthropic import AnthropicProvider

    return AnthropicProvider(settings.LLM_API_KEY, settings.LLM_MODEL)


def _cerebras(settings) -> LLMProvider:
    from .cerebras import CerebrasProvider

    return CerebrasProvider(settings.LLM_API_KEY, settings.LLM_MODEL)


_BUILDERS: dict[str, Callable[..., LLMProvider]] = {
    "openai": _openai,
    "anthropic": _anthropic,
    "cerebras": _cerebras,
}

SUPPORTED = tuple(_BUILDERS)


def provider_enabled(name: str | None = None) -> bool:
    """True unless the LLM strategy is switched off."""
    from settings import settings

    return (name if name is not None else settings.LLM_PROVIDER).lower() not in DISABLED


def create_provider(name: str | None = None) -> LLMProvider:
    """Instantiate the configured provider.  Raises ValueError for unknown names."""
    from settings import settings

    name = (name or settings.LLM_PROVIDER).lower()
    builder = _BUILDERS.get(name)
    if builder is None:
        raise ValueError(
            f"Unknown LLM_PROVIDER: '{name}'.  "
            f"Supported: {', '.join(SUPPORTED)}, none"
        )
    logger.info(f"Creating LLM provider: {name}")
    return builder(settings)
