"""Pytest conftest — flat module imports plus offline model stubs."""

import copy
import sys
from pathlib import Path

import numpy as np
import pytest

# Add backend/ to sys.path so `import session`, `from llm.client import ...` etc. work
_backend_dir = str(Path(__file__).resolve().parent.parent)
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from embeddings import EmbeddingProvider  # noqa: E402
from llm.client import GenerativeClient  # noqa: E402
from llm.providers.base import LLMProvider, SamplingParams  # noqa: E402
from profile_documents import parse_profile  # noqa: E402


PROFILE_DATA = {
    "basics": {
        "name": "Jane Doe",
        "title": "Software Engineer",
        "location": "Lisbon, Portugal",
        "bio": "I build reliable web services.",
        "email": "jane@example.com",
        "github": "https://github.com/janedoe",
        "linkedin": "https://linkedin.com/in/janedoe",
        "avatar": "/avatar.png",
    },
    "skills": [
        {"category": "Languages", "items": ["JavaScript", "Python"]},
        {"category": "Tools", "items": ["Docker", "Git"]},
    ],
    "projects": [
        {
            "title": "Trail Mapper",
            "description": "Offline hiking maps.",
            "technologies": ["React", "Leaflet"],
            "github": "https://github.com/janedoe/trail-mapper",
            "demo": "https://trails.example.com",
            "image": "/trail.png",
        },
        {
            "title": "Budget Bot",
            "description": "A chat bot that tracks expenses.",
            "technologies": ["Python"],
            "github": "https://github.com/janedoe/budget-bot",
            "image": "/bot.png",
        },
    ],
    "experience": [
        {
            "company": "Acme Corp",
            "position": "Backend Engineer",
            "duration": "2020 - Present",
            "description": "I lead the payments team.",
        },
    ],
    "education": [
        {"degree": "B.Sc. Computer Science", "institution": "University of Porto", "duration": "2014 - 2018"},
    ],
    "certifications": ["AWS Solutions Architect"],
    "honors": ["Dean's List 2017"],
    "languages": [{"name": "English", "level": "Fluent"}, {"name": "Portuguese", "level": "Native"}],
}


@pytest.fixture
def profile_data():
    return copy.deepcopy(PROFILE_DATA)


@pytest.fixture
def profile(profile_data):
    return parse_profile(profile_data)


# ── Model stubs ───────────────────────────────────────────────────────────

class LetterCountModel:
    """Stand-in SentenceTransformer: a-z letter counts, L2-normalized."""

    def __init__(self):
        self.calls = 0

    def _vec(self, text):
        v = np.array([text.lower().count(c) for c in "abcdefghijklmnopqrstuvwxyz"], dtype="float32")
        n = np.linalg.norm(v)
        return v / n if n else v

    def encode(self, texts, convert_to_numpy=True, normalize_embeddings=True):
        self.calls += 1
        if isinstance(texts, str):
            return self._vec(texts)
        return np.stack([self._vec(t) for t in texts])


def make_embedder(model=None):
    model = model or LetterCountModel()
    return EmbeddingProvider("stub-model", loader=lambda name: model)


class BrokenEmbedder(EmbeddingProvider):
    """Embedding provider whose model never loads."""

    def __init__(self):
        def _fail(name):
            raise RuntimeError("model download failed")

        super().__init__("broken-model", loader=_fail)


class ScriptedProvider(LLMProvider):
    """LLM provider that streams a fixed list of chunks."""

    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.requests = []

    @property
    def name(self):
        return "scripted"

    async def stream_text_deltas(self, messages, params: SamplingParams):
        self.requests.append((messages, params))
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


def make_generator(provider, timeout=5.0):
    return GenerativeClient(lambda: provider, name="scripted", timeout=timeout)


@pytest.fixture
def embedder():
    return make_embedder()


@pytest.fixture
def disabled_generator():
    return GenerativeClient(None)
