"""Prompt orchestrator — builds the LLM message list for one turn.

Layout::

    system   persona prompt (filled from profile basics)
    ...      recent conversation history (already trimmed by the caller)
    user     context block + visitor question
"""

import logging

from profile_documents import Basics
from .prompts import SYSTEM_PROMPT, USER_PROMPT, NO_CONTEXT

logger = logging.getLogger(__name__)


def build_system_prompt(basics: Basics) -> str:
    return SYSTEM_PROMPT.format(name=basics.name, title=basics.title, location=basics.location)


def build_messages(
    question: str,
    *,
    basics: Basics,
    context: str = "",
    history: list | None = None,
) -> list[dict]:
    """Assemble the OpenAI-format message list for the LLM.

    Parameters
    ----------
    question : str
        The visitor's raw query.
    basics : Basics
        Profile basics used to fill the persona prompt.
    context : str
        Retrieved profile documents joined by blank lines.
    history : list | None
        Prior ``{"role", "content"}`` messages, oldest first.
    """
    messages: list[dict] = [{"role": "system", "content": build_system_prompt(basics)}]

    if history:
        messages.extend({"role": m["role"], "content": m["content"]} for m in history)

    messages.append({
        "role": "user",
        "content": USER_PROMPT.format(context=context.strip() or NO_CONTEXT, question=question),
    })

    logger.info(
        "Messages: %d total (history=%d, context=%s)",
        len(messages),
        len(history or []),
        "yes" if context else "no",
    )
    return messages
