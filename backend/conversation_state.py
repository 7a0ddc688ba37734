"""Conversation State — bounded turn history for the single session.

The state holds the last ``HISTORY_MAX_TURNS`` turns (default 8, i.e. four
user/assistant exchanges).  Turns are only ever appended in pairs after a
turn completes; the oldest turns are evicted first.  Nothing here is
persisted — the history lives and dies with the session object.

Public API:
    ConversationTurn   — one user or assistant message
    ConversationState  — append_exchange(), recent(), messages(), clear()
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from profile_documents import ProfileDocument
from settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTurn:
    """One message in the conversation."""

    role: str                                   # user | assistant
    content: str
    sections: Optional[list[ProfileDocument]] = field(default=None, compare=False)

    def to_message(self) -> dict:
        """OpenAI-format chat message (sections are not sent to the LLM)."""
        return {"role": self.role, "content": self.content}

    def to_dict(self) -> dict:
        """Read-model row for rendering."""
        d = {
            "sender": "user" if self.role == "user" else "bot",
            "text": self.content,
            "streaming": False,
        }
        if self.sections:
            d["sections"] = [s.to_dict() for s in self.sections]
        return d


class ConversationState:
    """Append-only, FIFO-trimmed turn history."""

    def __init__(self, max_turns: int | None = None):
        self.max_turns = max_turns or settings.HISTORY_MAX_TURNS
        self._turns: deque[ConversationTurn] = deque(maxlen=self.max_turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(list(self._turns))

    def append_exchange(
        self,
        user_text: str,
        assistant_text: str,
        sections: Optional[list[ProfileDocument]] = None,
    ) -> ConversationTurn:
        """Record a completed user/assistant pair.  Returns the assistant turn."""
        assistant = ConversationTurn("assistant", assistant_text, sections or None)
        self._turns.append(ConversationTurn("user", user_text))
        self._turns.append(assistant)
        logger.debug(f"Conversation state: {len(self._turns)} turns")
        return assistant

    def recent(self, n: int | None = None) -> list[ConversationTurn]:
        """The last *n* turns (default ``PROMPT_HISTORY``), oldest first."""
        n = settings.PROMPT_HISTORY if n is None else n
        if n <= 0:
            return []
        return list(self._turns)[-n:]

    def messages(self, n: int | None = None) -> list[dict]:
        """Recent turns as LLM chat messages."""
        return [t.to_message() for t in self.recent(n)]

    def clear(self) -> None:
        self._turns.clear()
