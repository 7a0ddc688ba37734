"""LLM response generation — streaming with sentence-boundary cleanup.

``stream_llm_response`` pushes the accumulated text to ``on_partial`` after
every delta and returns the cleaned final text.  It never emits the
terminal event itself; the session does that once per turn.
"""

import logging
import re
from typing import Callable, Optional

from errors import EmptyGeneration
from profile_documents import Basics
from .client import GenerativeClient
from .prompt_orchestrator import build_messages

logger = logging.getLogger(__name__)

# Terminal punctuation, optionally followed by closing quotes/brackets,
# that ends a token ("3.5" and "e.g" do not count).
_SENTENCE_END = re.compile(r"[.!?][\"'”’)\]]*(?=\s|$)")

# Same, but only once whitespace follows; later deltas cannot undo it.
_SETTLED_END = re.compile(r"[.!?][\"'”’)\]]*(?=\s)")


def _through_last(pattern: re.Pattern, text: str) -> str:
    last = None
    for last in pattern.finditer(text):
        pass
    if last is None:
        return ""
    return text[: last.end()]


def clean_response(text: str) -> str:
    """Truncate *text* after its last complete sentence.

    Returns "" when no sentence was completed.
    """
    return _through_last(_SENTENCE_END, text.strip()).strip()


def settled_text(text: str) -> str:
    """The part of a still-streaming answer that is final.

    Always a prefix of ``clean_response`` of any longer stream, so it can
    be forwarded as append-only deltas.
    """
    return _through_last(_SETTLED_END, text.lstrip())


async def stream_llm_response(
    client: GenerativeClient,
    question: str,
    *,
    basics: Basics,
    context: str,
    history: Optional[list] = None,
    on_partial: Optional[Callable[[str], None]] = None,
) -> str:
    """Run one streamed completion.  Raises ModelUnavailable / EmptyGeneration."""
    messages = build_messages(question, basics=basics, context=context, history=history)

    accumulated = ""
    async for delta in client.stream(messages):
        accumulated += delta
        if on_partial is not None:
            on_partial(accumulated)

    cleaned = clean_response(accumulated)
    if not cleaned:
        raise EmptyGeneration(f"No complete sentence in LLM output ({len(accumulated)} chars)")
    if len(cleaned) < len(accumulated.strip()):
        logger.info("Dropped trailing partial sentence from LLM output")
    return cleaned
