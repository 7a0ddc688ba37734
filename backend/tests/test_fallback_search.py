"""Tests for keyword fallback search — the no-model floor."""

import pytest

from fallback_search import fallback_search, generic_introduction


def test_empty_query_gives_introduction(profile):
    assert fallback_search("", profile) == generic_introduction(profile)


def test_none_query_gives_introduction(profile):
    assert fallback_search(None, profile) == generic_introduction(profile)


def test_no_trigger_gives_introduction(profile):
    answer = fallback_search("xyzzy", profile)
    assert answer.startswith("I'm an AI assistant for Jane Doe.")


def test_skills(profile):
    answer = fallback_search("What skills do you have?", profile)
    assert answer == "Languages skills: JavaScript, Python\n\nTools skills: Docker, Git"


def test_name(profile):
    answer = fallback_search("What is your name?", profile)
    assert answer == "Jane Doe is a Software Engineer based in Lisbon, Portugal."


def test_multiple_sections_joined(profile):
    answer = fallback_search("Tell me about your work", profile)
    parts = answer.split("\n\n")
    assert parts[0] == "I build reliable web services."
    assert parts[1].startswith("Trail Mapper: Offline hiking maps.")
    assert len(parts) == 3


def test_years_with_known_technology(profile):
    answer = fallback_search("How many years of experience in Python?", profile)
    assert "Backend Engineer at Acme Corp (2020 - Present)" in answer
    assert "I have several years of experience with Python" in answer


def test_years_with_unknown_technology(profile):
    answer = fallback_search("How many years with Rust?", profile)
    assert "several years" not in answer
    assert answer == generic_introduction(profile)


def test_education(profile):
    answer = fallback_search("Where did you study?", profile)
    assert answer == "B.Sc. Computer Science from University of Porto (2014 - 2018)"


@pytest.mark.parametrize("broken", [None, object()])
def test_never_raises(broken):
    answer = fallback_search("skills", broken)
    assert isinstance(answer, str) and answer
