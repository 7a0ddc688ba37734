"""Centralized configuration — every tunable in one place.

Environment variables override defaults. Import anywhere:

    from settings import settings

All values are frozen at startup. To change, update .env and restart.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level above backend/)
_project_root = Path(__file__).resolve().parent.parent
load_dotenv(_project_root / ".env")


# ── Helpers ───────────────────────────────────────────────────────────────

def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int = 0) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float = 0.0) -> float:
    return float(os.getenv(key, str(default)))


def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes")


def _env_path(key: str, default: Path) -> str:
    """Path setting; relative values resolve against the project root."""
    raw = os.getenv(key)
    if not raw:
        return str(default)
    path = Path(raw)
    return str(path if path.is_absolute() else _project_root / path)


# ── Settings ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    """Application settings.  Immutable after creation."""

    # ── Profile ───────────────────────────────────────────────────
    PROFILE_PATH: str = _env_path("PROFILE_PATH", _project_root / "data" / "profile.json")

    # ── LLM Provider ──────────────────────────────────────────────
    # Supported: openai, anthropic, cerebras, none
    # "none" disables the LLM strategy; templates answer every turn.
    LLM_PROVIDER: str = _env("LLM_PROVIDER", "none")
    LLM_API_KEY: str = _env("LLM_API_KEY")
    LLM_MODEL: str = _env("LLM_MODEL")
    # Empty LLM_MODEL → each provider picks its own default.
    LLM_BASE_URL: str = _env("LLM_BASE_URL")
    # Optional: override API endpoint (vLLM, Ollama, Azure OpenAI, etc.)

    # ── Sampling ──────────────────────────────────────────────────
    LLM_TEMPERATURE: float = _env_float("LLM_TEMPERATURE", 0.2)
    LLM_TOP_P: float = _env_float("LLM_TOP_P", 0.1)
    MAX_RESPONSE_TOKENS: int = _env_int("MAX_RESPONSE_TOKENS", 256)
    LLM_FREQUENCY_PENALTY: float = _env_float("LLM_FREQUENCY_PENALTY", 0.5)
    LLM_PRESENCE_PENALTY: float = _env_float("LLM_PRESENCE_PENALTY", 0.5)
    # Seconds to wait for each streamed chunk before giving up on the LLM.
    GENERATION_TIMEOUT: float = _env_float("GENERATION_TIMEOUT", 30.0)

    # ── Embeddings ────────────────────────────────────────────────
    # all-MiniLM-L6-v2: 384-dim, symmetric, small enough for a laptop.
    EMBEDDING_MODEL: str = _env("EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2")

    # ── Retrieval ─────────────────────────────────────────────────
    RETRIEVAL_K: int = _env_int("RETRIEVAL_K", 3)

    # ── Conversation ──────────────────────────────────────────────
    HISTORY_MAX_TURNS: int = _env_int("HISTORY_MAX_TURNS", 8)
    PROMPT_HISTORY: int = _env_int("PROMPT_HISTORY", 6)

    # ── Templates ─────────────────────────────────────────────────
    # Rewrite retrieved text into a conversational register ("I am" → "I'm")
    # and append starters / personal touches.
    TEMPLATE_CONVERSATIONAL: bool = _env_bool("TEMPLATE_CONVERSATIONAL", True)

    # ── Server ────────────────────────────────────────────────────
    # Comma-separated origins allowed by CORS middleware.
    ALLOWED_ORIGINS: str = _env("ALLOWED_ORIGINS", "*")
    HOST: str = _env("HOST", "0.0.0.0")
    PORT: int = _env_int("PORT", 8000)


settings = Settings()
