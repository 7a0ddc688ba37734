"""Assistant session — the public entry point of the response engine.

One ``AssistantSession`` per application instance.  It owns everything
that used to be process-wide state: the embedding cache, the LLM client,
the conversation history and the listener lists.

Turn lifecycle::

    Idle → Retrieving ─┬─ Generating(LLM) → Streaming ─┬→ Completed
                       │                               └→ Generating(Template) → Completed
                       ├─ Generating(Template) ─────────→ Completed
                       └─ Failed → FallbackSearch ──────→ Completed

Every completed turn appends a user/assistant pair to the conversation
state and emits exactly one ``done=True`` StreamingResponse.  Model errors
never escape ``submit_query``; the worst case is an apology message.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from composer import ResponseComposer
from conversation_state import ConversationState, ConversationTurn
from embeddings import EmbeddingProvider
from errors import TurnInProgress
from events import EventChannel, LoadingState, StreamingResponse, TurnStream
from fallback_search import fallback_search
from llm.client import GenerativeClient
from profile_documents import Profile, ProfileDocument
from settings import settings

logger = logging.getLogger(__name__)

APOLOGY = (
    "I apologize, but I'm having trouble generating a response. Please try asking "
    "a different question about {name}'s background, skills, or experience."
)


class AssistantSession:
    """Single-conversation controller around the response composer."""

    def __init__(
        self,
        profile: Profile,
        *,
        embedder: Optional[EmbeddingProvider] = None,
        generator: Optional[GenerativeClient] = None,
        rng: Optional[random.Random] = None,
        conversational: Optional[bool] = None,
        max_turns: Optional[int] = None,
    ):
        self.profile = profile
        self.embedder = embedder or EmbeddingProvider()
        self.generator = generator if generator is not None else GenerativeClient.from_settings()
        self.composer = ResponseComposer(
            profile,
            self.embedder,
            self.generator,
            rng=rng,
            conversational=conversational,
        )
        self.state = ConversationState(max_turns)
        self.stream_events: EventChannel[StreamingResponse] = EventChannel("stream")
        self._pending_query: Optional[str] = None
        self._pending_stream: Optional[TurnStream] = None

    # ── Observers ─────────────────────────────────────────────────

    def on_loading(self, fn: Callable[[LoadingState], None]) -> Callable[[], None]:
        """Subscribe to model-acquisition progress.  Returns unsubscribe."""
        return self.generator.loading.subscribe(fn)

    def on_stream(self, fn: Callable[[StreamingResponse], None]) -> Callable[[], None]:
        """Subscribe to answer streaming.  Returns unsubscribe."""
        return self.stream_events.subscribe(fn)

    @property
    def loading_state(self) -> LoadingState:
        return self.generator.loading_state

    @property
    def busy(self) -> bool:
        return self._pending_query is not None

    # ── Pipeline ──────────────────────────────────────────────────

    async def _answer(
        self,
        query: str,
        stream: Optional[TurnStream] = None,
    ) -> tuple[str, Optional[list[ProfileDocument]]]:
        try:
            retrieval = await self.composer.retrieve(query)
        except Exception as e:
            # Every retrieval failure drops the turn to keyword search.
            logger.warning(f"Retrieval failed, using fallback search: {e}")
            return fallback_search(query, self.profile), None

        text = await self.composer.generate(
            query,
            retrieval,
            history=self.state.messages(settings.PROMPT_HISTORY),
            on_partial=stream.partial if stream is not None else None,
        )
        return text, retrieval.sections

    async def generate_response(self, query: str) -> str:
        """Answer *query* without emitting events or recording the turn."""
        text, _ = await self._answer(query)
        return text

    async def submit_query(self, query: str) -> ConversationTurn:
        """Run one turn and return the recorded assistant turn.

        Raises TurnInProgress if the previous turn has not finished.
        """
        if self.busy:
            raise TurnInProgress("A response is already being generated")

        self._pending_query = query
        stream = self._pending_stream = TurnStream(self.stream_events)
        try:
            try:
                text, sections = await self._answer(query, stream)
            except Exception as e:
                logger.error(f"Turn failed: {e}")
                text, sections = APOLOGY.format(name=self.profile.basics.name), None

            turn = self.state.append_exchange(query, text, sections)
            stream.finish(text, sections)
            return turn
        finally:
            self._pending_query = None
            self._pending_stream = None

    # ── Read model ────────────────────────────────────────────────

    def messages(self) -> list[dict]:
        """Ordered ``{sender, text, sections?, streaming}`` rows for rendering."""
        rows = [turn.to_dict() for turn in self.state]
        if self._pending_query is not None:
            rows.append({"sender": "user", "text": self._pending_query, "streaming": False})
            last = self._pending_stream.last if self._pending_stream else None
            rows.append({"sender": "bot", "text": last.content if last else "", "streaming": True})
        return rows

    def reset(self) -> None:
        """Forget the conversation (the embedding cache is kept)."""
        self.state.clear()
