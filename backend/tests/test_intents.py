"""Tests for keyword intent ordering."""

import pytest

from intents import DEFAULT_INTENT, INTENT_NAMES, INTENTS


def classify(query: str) -> str:
    q = query.lower()
    return next((i.name for i in INTENTS if i.matches(q)), DEFAULT_INTENT)


@pytest.mark.parametrize("query,expected", [
    ("Who are you?", "self_introduction"),
    ("Tell me about yourself", "self_introduction"),
    ("Tell me about you", "self_introduction"),
    ("What about you?", "self_introduction"),
    ("How can I contact you?", "contact"),
    ("What's your email?", "contact"),
    ("What are your skills?", "skills"),
    ("Which tech stack are you proficient in?", "skills"),
    ("Tell me about your projects", "projects"),
    ("What have you built?", "projects"),
    ("Where do you work?", "experience"),
    ("What is your degree?", "education"),
    ("Where are you based?", "location"),
    ("What is your current focus?", "current_focus"),
    ("Do you lead a team?", "leadership"),
    ("What do you do for fun?", "hobbies"),
    ("hello there", "default"),
])
def test_classify(query, expected):
    assert classify(query) == expected


def test_first_match_wins():
    # "work" (experience) precedes "these days" (current_focus)
    assert classify("What are you working on these days?") == "experience"
    # "skill" precedes "project"
    assert classify("Which skills did your projects use?") == "skills"


def test_names_unique_and_default_last():
    assert len(set(INTENT_NAMES)) == len(INTENT_NAMES)
    assert INTENT_NAMES[-1] == DEFAULT_INTENT
