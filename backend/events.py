"""Events pushed from the session to whoever renders the chat.

Two event types:

    LoadingState       — model acquisition progress
    StreamingResponse  — accumulated answer text for the in-flight turn

Listeners register on an ``EventChannel`` and get an unsubscribe
callable back::

    unsubscribe = session.on_stream(lambda ev: print(ev.content))

Listeners run in registration order.  A listener that raises is logged
and skipped; it never breaks the turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

from profile_documents import ProfileDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LoadingState:
    loading: bool = False
    progress: float = 0.0
    status: str = ""

    def to_dict(self) -> dict:
        return {"loading": self.loading, "progress": self.progress, "status": self.status}


@dataclass(frozen=True)
class StreamingResponse:
    content: str
    done: bool
    sections: Optional[list[ProfileDocument]] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        d = {"content": self.content, "done": self.done}
        if self.sections is not None:
            d["sections"] = [s.to_dict() for s in self.sections]
        return d


class EventChannel(Generic[T]):
    """Ordered list of listeners for one event type."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, fn: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(fn)

        def unsubscribe() -> None:
            if fn in self._listeners:
                self._listeners.remove(fn)

        return unsubscribe

    def emit(self, event: T) -> None:
        for fn in list(self._listeners):
            try:
                fn(event)
            except Exception as e:
                logger.error(f"{self.name} listener error: {e}")

    def clear(self) -> None:
        """Remove all listeners (useful for testing)."""
        self._listeners.clear()


class TurnStream:
    """Per-turn emitter that guarantees a single terminal event.

    Anything emitted after the ``done=True`` event is dropped.
    """

    def __init__(self, channel: EventChannel[StreamingResponse]):
        self._channel = channel
        self.finished = False
        self.last: Optional[StreamingResponse] = None

    def partial(self, content: str) -> None:
        self._emit(StreamingResponse(content=content, done=False))

    def finish(self, content: str, sections: Optional[list[ProfileDocument]] = None) -> None:
        self._emit(StreamingResponse(content=content, done=True, sections=sections))

    def _emit(self, event: StreamingResponse) -> None:
        if self.finished:
            logger.debug("Dropping stream event after terminal event")
            return
        self.finished = event.done
        self.last = event
        self._channel.emit(event)
