"""LLM client — owns the provider instance and its one-time acquisition.

The session holds a single ``GenerativeClient``.  The provider (Cerebras,
OpenAI, Anthropic) is built on first use; callers that arrive while it is
being built await the same acquisition.  Acquisition progress is broadcast
as ``LoadingState`` events — this client is the only writer.

A failed acquisition is remembered: later turns skip the LLM and go
straight to templates instead of re-trying a broken configuration.
Call ``reset()`` to allow another attempt.

Usage:
    client = GenerativeClient.from_settings()
    async for delta in client.stream(messages):
        ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

from errors import ModelUnavailable
from events import EventChannel, LoadingState
from settings import settings
from .providers import LLMProvider, SamplingParams, create_provider, provider_enabled

logger = logging.getLogger(__name__)


class GenerativeClient:
    """Lazy, single-flight wrapper around an ``LLMProvider``."""

    def __init__(
        self,
        factory: Optional[Callable[[], LLMProvider]] = None,
        *,
        name: str = "",
        timeout: float | None = None,
        params: SamplingParams | None = None,
    ):
        self.name = name or (settings.LLM_PROVIDER if factory else "none")
        self.timeout = settings.GENERATION_TIMEOUT if timeout is None else timeout
        self.params = params or SamplingParams.from_settings()
        self.loading: EventChannel[LoadingState] = EventChannel("loading")
        self._factory = factory
        self._provider: Optional[LLMProvider] = None
        self._acquiring: Optional[asyncio.Task] = None
        self._failure: Optional[BaseException] = None
        self._loading_state = LoadingState()

    @classmethod
    def from_settings(cls) -> GenerativeClient:
        if not provider_enabled():
            logger.info("LLM disabled (LLM_PROVIDER=none) — template responses only")
            return cls(None)
        return cls(create_provider, name=settings.LLM_PROVIDER.lower())

    # ── State ─────────────────────────────────────────────────────

    @property
    def available(self) -> bool:
        """False when disabled or when acquisition already failed."""
        return self._factory is not None and self._failure is None

    @property
    def loading_state(self) -> LoadingState:
        return self._loading_state

    def _set_loading(self, state: LoadingState) -> None:
        self._loading_state = state
        self.loading.emit(state)

    def reset(self) -> None:
        """Forget the provider and any failure (forces re-acquisition)."""
        self._provider = None
        self._failure = None
        self._set_loading(LoadingState())

    # ── Acquisition ───────────────────────────────────────────────

    async def _acquire(self) -> LLMProvider:
        self._set_loading(LoadingState(True, 0.0, f"Connecting to {self.name}..."))
        try:
            provider = await asyncio.to_thread(self._factory)
        except Exception as e:
            self._failure = e
            self._set_loading(LoadingState(False, 0.0, f"{self.name} unavailable"))
            raise
        self._set_loading(LoadingState(False, 1.0, "Ready"))
        return provider

    async def acquire(self) -> LLMProvider:
        """Return the provider, building it once."""
        if self._provider is not None:
            return self._provider
        if not self.available:
            raise ModelUnavailable(f"LLM provider '{self.name}' is not available", cause=self._failure)

        task = self._acquiring
        if task is None:
            task = self._acquiring = asyncio.create_task(self._acquire())
        try:
            provider = await task
        except Exception as e:
            logger.error(f"LLM provider acquisition failed: {e}")
            raise ModelUnavailable(f"LLM provider '{self.name}' failed to load", cause=e) from e
        finally:
            if self._acquiring is task and task.done():
                self._acquiring = None

        self._provider = provider
        return provider

    # ── Streaming ─────────────────────────────────────────────────

    async def stream(
        self,
        messages: list[dict],
        params: SamplingParams | None = None,
    ) -> AsyncIterator[str]:
        """Yield text deltas; every failure surfaces as ModelUnavailable.

        Each chunk must arrive within ``timeout`` seconds.
        """
        provider = await self.acquire()
        deltas = provider.stream_text_deltas(messages, params or self.params)
        iterator = deltas.__aiter__()
        try:
            while True:
                try:
                    delta = await asyncio.wait_for(iterator.__anext__(), timeout=self.timeout or None)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as e:
                    raise ModelUnavailable(f"No output from {self.name} for {self.timeout}s", cause=e) from e
                except ModelUnavailable:
                    raise
                except Exception as e:
                    raise ModelUnavailable(f"Generation failed: {e}", cause=e) from e
                yield delta
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                try:
                    await aclose()
                except Exception as e:
                    logger.debug(f"Error closing stream: {e}")
