"""Tests for Settings configuration.

All tests run without a real .env; we use environment variable injection
via monkeypatch so there's no filesystem dependency.
"""

import importlib
from pathlib import Path

import pytest

_KEYS = (
    "PROFILE_PATH", "LLM_PROVIDER", "LLM_TEMPERATURE", "LLM_TOP_P", "MAX_RESPONSE_TOKENS",
    "GENERATION_TIMEOUT", "EMBEDDING_MODEL", "RETRIEVAL_K", "HISTORY_MAX_TURNS",
    "PROMPT_HISTORY", "TEMPLATE_CONVERSATIONAL", "ALLOWED_ORIGINS", "PORT",
)


@pytest.fixture
def reload_settings(monkeypatch):
    """Reload settings with specific env vars patched.

    Returns a function giving the reloaded ``settings`` singleton; the
    original is restored afterwards.
    """
    import settings as settings_mod

    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        importlib.reload(settings_mod)
        return settings_mod.settings

    yield _reload
    monkeypatch.undo()
    importlib.reload(settings_mod)


class TestSettingsDefaults:
    def test_llm_disabled_by_default(self, reload_settings):
        s = reload_settings()
        assert s.LLM_PROVIDER == "none"

    def test_sampling_defaults(self, reload_settings):
        s = reload_settings()
        assert s.LLM_TEMPERATURE == pytest.approx(0.2)
        assert s.LLM_TOP_P == pytest.approx(0.1)
        assert s.MAX_RESPONSE_TOKENS == 256
        assert s.GENERATION_TIMEOUT == pytest.approx(30.0)

    def test_conversation_defaults(self, reload_settings):
        s = reload_settings()
        assert s.RETRIEVAL_K == 3
        assert s.HISTORY_MAX_TURNS == 8
        assert s.PROMPT_HISTORY == 6
        assert s.TEMPLATE_CONVERSATIONAL is True

    def test_embedding_default(self, reload_settings):
        s = reload_settings()
        assert s.EMBEDDING_MODEL == "sentence-transformers/all-MiniLM-L6-v2"

    def test_profile_path_default(self, reload_settings):
        s = reload_settings()
        expected = Path(__file__).resolve().parent.parent.parent / "data" / "profile.json"
        assert s.PROFILE_PATH == str(expected)


class TestSettingsOverrides:
    def test_env_overrides(self, reload_settings):
        s = reload_settings(LLM_PROVIDER="openai", RETRIEVAL_K="5", GENERATION_TIMEOUT="2.5")
        assert s.LLM_PROVIDER == "openai"
        assert s.RETRIEVAL_K == 5
        assert s.GENERATION_TIMEOUT == pytest.approx(2.5)

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), ("false", False), ("0", False),
    ])
    def test_bool_parsing(self, reload_settings, raw, expected):
        assert reload_settings(TEMPLATE_CONVERSATIONAL=raw).TEMPLATE_CONVERSATIONAL is expected

    def test_relative_profile_path_resolves_against_project_root(self, reload_settings):
        s = reload_settings(PROFILE_PATH="data/other.json")
        root = Path(__file__).resolve().parent.parent.parent
        assert s.PROFILE_PATH == str(root / "data" / "other.json")

    def test_absolute_profile_path_kept(self, reload_settings, tmp_path):
        target = tmp_path / "me.json"
        assert reload_settings(PROFILE_PATH=str(target)).PROFILE_PATH == str(target)

    def test_settings_frozen(self, reload_settings):
        s = reload_settings()
        with pytest.raises(Exception):
            s.RETRIEVAL_K = 10
