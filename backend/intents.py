"""Keyword intents for the template composer.

Intents are evaluated IN ORDER against the lower-cased query — first
match wins.  Order matters: "what are you working on" hits ``experience``
(via "work") before ``current_focus`` is ever checked.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Intent:
    name: str
    keywords: tuple[str, ...]
    # Matched only as whole words ("about you" must not hit "about your").
    whole_words: tuple[str, ...] = ()

    def matches(self, query_lower: str) -> bool:
        if any(k in query_lower for k in self.keywords):
            return True
        return any(re.search(rf"\b{re.escape(w)}\b", query_lower) for w in self.whole_words)


INTENTS: tuple[Intent, ...] = (
    Intent(
        "self_introduction",
        ("who are you", "about yourself", "introduce yourself"),
        whole_words=("about you",),
    ),
    Intent("contact", ("contact", "email", "reach", "get in touch", "hire")),
    Intent("skills", ("skill", "know", "capable", "tech stack", "proficient")),
    Intent("projects", ("project", "portfolio", "built")),
    Intent("experience", ("experience", "work", "job", "career", "employ")),
    Intent("education", ("education", "degree", "study", "studied", "university", "college")),
    Intent("location", ("location", "where", "based", "live")),
    Intent("current_focus", ("focus", "current", "nowadays", "these days")),
    Intent("leadership", ("lead", "manage", "mentor", "team")),
    Intent("hobbies", ("hobb", "free time", "spare time", "fun", "passion", "interest")),
)

DEFAULT_INTENT = "default"

INTENT_NAMES = tuple(i.name for i in INTENTS) + (DEFAULT_INTENT,)
