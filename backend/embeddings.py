"""Local embedding model — no API key required.

Default model: sentence-transformers/all-MiniLM-L6-v2 (384-dim, symmetric).
Swap via EMBEDDING_MODEL env var.

The model is loaded lazily on the first ``embed()`` call.  Concurrent
callers that arrive while the load is running await the same load task,
so the weights are only downloaded once.  Vectors are normalized and
memoized by exact text for the lifetime of the provider.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import numpy as np
from sentence_transformers import SentenceTransformer

from errors import ModelUnavailable
from settings import settings

logger = logging.getLogger(__name__)


class EmbeddingProvider:
    """Memoizing wrapper around a SentenceTransformer model."""

    def __init__(
        self,
        model_name: str = "",
        loader: Optional[Callable[[str], Any]] = None,
    ):
        self.model_name = model_name or settings.EMBEDDING_MODEL
        self._loader = loader or SentenceTransformer
        self._model: Any = None
        self._loading: Optional[asyncio.Task] = None
        self._cache: dict[str, np.ndarray] = {}

    @property
    def loaded(self) -> bool:
        return self._model is not None

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # ── Model acquisition ─────────────────────────────────────────

    async def _load(self) -> Any:
        logger.info(f"Loading embedding model {self.model_name}")
        return await asyncio.to_thread(self._loader, self.model_name)

    async def _get_model(self) -> Any:
        """Return the model, starting (or joining) the one-time load."""
        if self._model is not None:
            return self._model

        task = self._loading
        if task is None:
            task = self._loading = asyncio.create_task(self._load())
        try:
            model = await task
        except Exception as e:
            logger.error(f"Embedding model unavailable: {e}")
            raise ModelUnavailable(f"Embedding model {self.model_name} unavailable", cause=e) from e
        finally:
            if self._loading is task and task.done():
                self._loading = None

        if self._model is None:
            self._model = model
            logger.info(f"Embedding model ready ({self.model_name})")
        return self._model

    # ── Public API ────────────────────────────────────────────────

    async def embed(self, text: str) -> np.ndarray:
        """Encode *text*, served from cache when seen before."""
        cached = self._cache.get(text)
        if cached is not None:
            return cached

        model = await self._get_model()
        try:
            vector = await asyncio.to_thread(
                model.encode, text, convert_to_numpy=True, normalize_embeddings=True,
            )
        except Exception as e:
            raise ModelUnavailable(f"Embedding failed: {e}", cause=e) from e

        vector = np.asarray(vector, dtype="float32")
        self._cache[text] = vector
        return vector

    async def embed_many(self, texts: list[str]) -> list[np.ndarray]:
        """Batch encode, only sending cache misses to the model.

        Much faster than calling embed() in a loop on a cold cache.
        """
        missing = list(dict.fromkeys(t for t in texts if t not in self._cache))
        if missing:
            model = await self._get_model()
            try:
                vectors = await asyncio.to_thread(
                    model.encode, missing, convert_to_numpy=True, normalize_embeddings=True,
                )
            except Exception as e:
                raise ModelUnavailable(f"Embedding failed: {e}", cause=e) from e
            for text, vector in zip(missing, vectors):
                self._cache[text] = np.asarray(vector, dtype="float32")
        return [self._cache[t] for t in texts]
