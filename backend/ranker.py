"""Cosine-similarity ranking over profile documents.

Pure numpy, no state.  The document set is small (tens of entries) so a
linear scan is all that is needed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from profile_documents import ProfileDocument


@dataclass(frozen=True)
class ScoredDocument:
    """A ProfileDocument with its similarity to the current query."""

    document: ProfileDocument
    score: float

    @property
    def id(self) -> str:
        return self.document.id

    @property
    def category(self) -> str:
        return self.document.category

    @property
    def content(self) -> str:
        return self.document.content


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1].  Zero-magnitude vectors score 0."""
    a = np.asarray(v1, dtype="float64")
    b = np.asarray(v2, dtype="float64")
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0:
        return 0.0
    return float(np.clip(np.dot(a, b) / norm, -1.0, 1.0))


def rank(
    query_vector: Sequence[float],
    candidates: Iterable[tuple[ProfileDocument, Sequence[float]]],
) -> list[ScoredDocument]:
    """Score every candidate and sort descending.

    ``sorted`` is stable, so equal scores keep their input order.
    """
    scored = [
        ScoredDocument(document=doc, score=cosine_similarity(query_vector, vec))
        for doc, vec in candidates
    ]
    return sorted(scored, key=lambda s: s.score, reverse=True)
