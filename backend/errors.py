"""Error taxonomy for the assistant pipeline.

Only ``MalformedProfile`` is meant to escape to the caller (at startup).
Everything else is caught at the session boundary and turned into a
best-effort textual answer.
"""

from __future__ import annotations

from typing import Optional


class AssistantError(Exception):
    """Base class for assistant errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ModelUnavailable(AssistantError):
    """Embedding or generation capability failed to load or respond."""


class EmptyGeneration(ModelUnavailable):
    """The generative model returned no usable text."""


class MalformedProfile(AssistantError):
    """A required profile field is missing or has the wrong shape."""


class TurnInProgress(AssistantError):
    """A query was submitted while the previous turn is still running."""
