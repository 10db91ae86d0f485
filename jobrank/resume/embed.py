"""
Embedding providers.

Embeddings give the job scorer a semantic-similarity signal on top of
keyword overlap.  The signal is optional: when no provider is
configured :class:`NullEmbeddingProvider` answers ``None`` for every
text and the scorer simply adds nothing for it.

Three providers are available:

* ``none``    – :class:`NullEmbeddingProvider` (default)
* ``hashing`` – a deterministic, offline term-hashing vector
* ``openai``  – the OpenAI embeddings API
"""

from __future__ import annotations

import hashlib
import logging
import math
import os
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Turns text into a fixed-length vector, or ``None`` when unavailable."""

    @abstractmethod
    def embed(self, text: str) -> Optional[List[float]]:
        raise NotImplementedError


class NullEmbeddingProvider(EmbeddingProvider):
    """No embedding backend configured."""

    def embed(self, text: str) -> Optional[List[float]]:
        return None


def _hash_to_float(value: str) -> float:
    """Deterministically hash a string into a float between 0 and 1."""
    h = hashlib.md5(value.encode("utf-8")).hexdigest()
    return int(h[:8], 16) / 0xFFFFFFFF


class HashingEmbeddingProvider(EmbeddingProvider):
    """Embed text by hashing each token into a fixed size vector.

    Each token contributes to every position based on its hash.  The
    result is normalised to unit length.  Cheap and deterministic, but
    only captures shared vocabulary, not meaning.
    """

    def __init__(self, dim: int = 32) -> None:
        self.dim = dim

    def embed(self, text: str) -> Optional[List[float]]:
        tokens = (text or "").lower().split()
        if not tokens:
            return None
        vector = [0.0] * self.dim
        for token in tokens:
            base = _hash_to_float(token)
            for i in range(self.dim):
                # Rotate hash for each dimension
                vector[i] += (base * (i + 1)) % 1.0
        norm = sum(v * v for v in vector) ** 0.5 or 1.0
        return [v / norm for v in vector]


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """OpenAI embeddings API (e.g. text-embedding-3-small)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "text-embedding-3-small",
        timeout: float = 15.0,
        max_chars: int = 8000,
    ) -> None:
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "openai package is required for OpenAIEmbeddingProvider. Install it via pip."
            ) from exc
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY not provided")
        self.client = OpenAI(api_key=api_key, timeout=timeout)
        self.model = model
        self.max_chars = max_chars

    def embed(self, text: str) -> Optional[List[float]]:
        content = (text or "").strip()[: self.max_chars]
        if not content:
            return None
        resp = self.client.embeddings.create(model=self.model, input=[content])
        return list(resp.data[0].embedding)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity over the common prefix of two vectors; 0.0 for zero vectors."""
    dot = na = nb = 0.0
    for x, y in zip(a, b):
        dot += x * y
        na += x * x
        nb += y * y
    if not na or not nb:
        return 0.0
    return dot / (math.sqrt(na) * math.sqrt(nb))


def get_embedding_provider(name: str | None = None, **kwargs: object) -> EmbeddingProvider:
    """Return the embedding provider called ``name``.

    Falls back to :class:`NullEmbeddingProvider` (with a warning) when the
    requested provider cannot be initialised, e.g. a missing API key.
    """
    choice = (name or os.getenv("JOBRANK_EMBEDDINGS") or "none").strip().lower()
    if choice == "hashing":
        return HashingEmbeddingProvider()
    if choice == "openai":
        try:
            return OpenAIEmbeddingProvider(**kwargs)  # type: ignore[arg-type]
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise OpenAIEmbeddingProvider: %s", exc)
            return NullEmbeddingProvider()
    if choice not in ("none", ""):
        logger.warning("Unknown embedding provider '%s'; embeddings disabled", choice)
    return NullEmbeddingProvider()
