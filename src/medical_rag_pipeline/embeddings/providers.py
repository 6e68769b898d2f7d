"""
Embeddings Module - Single Responsibility: turn text into a vector of D floats.

It has ONE job: convert text to vector embeddings, and say clearly when
it could not.

FAILURE CONTRACT:
-----------------
Providers raise EmbeddingUnavailable. Callers never catch that directly;
they go through try_embed(), which returns EmbeddingResult | EmbeddingError
so the pipeline can branch on the failure kind and substitute
fallback_vector(). A fallback vector keeps ranking well-defined (scores are
meaningless, but the pipeline stays live) and is logged separately from a
genuine embedding.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
from dataclasses import dataclass
from typing import Literal, Protocol

import numpy as np
from openai import OpenAI, OpenAIError

from medical_rag_pipeline.core.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 1536


class EmbeddingProvider(Protocol):
    """Protocol for embedding providers - enables easy swapping."""

    @property
    def dimensions(self) -> int:
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-3-small by default. The client is created on first
    use so a missing key surfaces as EmbeddingUnavailable instead of an
    import-time crash. Retries are disabled: a failed call falls back once.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        dimensions: int = DEFAULT_DIMENSIONS,
        timeout: float = 30.0,
    ):
        self.model = model
        self._dimensions = dimensions
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._timeout = timeout
        self._client: OpenAI | None = None

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_client(self) -> OpenAI:
        if not self._api_key:
            raise EmbeddingUnavailable("OPENAI_API_KEY is not set")
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        return self._client

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        client = self._get_client()

        kwargs = {"input": text, "model": self.model}
        # Only the v3 models accept a requested dimensionality
        if self.model.startswith("text-embedding-3"):
            kwargs["dimensions"] = self._dimensions

        try:
            response = client.embeddings.create(**kwargs)
            values = response.data[0].embedding
        except OpenAIError as e:
            raise EmbeddingUnavailable(f"Embedding request failed: {e}", cause=e) from e
        except (IndexError, AttributeError, TypeError) as e:
            raise EmbeddingUnavailable("Malformed embedding response", cause=e) from e

        return np.array(values, dtype=np.float32)


_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

_STOPWORDS = frozenset(
    {
        # English
        "a", "an", "and", "are", "as", "at", "be", "by", "do", "does", "for", "from",
        "how", "i", "in", "is", "it", "my", "of", "on", "or", "that", "the", "this",
        "to", "was", "what", "when", "which", "with",
        # Portuguese
        "o", "os", "as", "um", "uma", "de", "da", "do", "das", "dos", "e", "em", "no",
        "na", "que", "para", "com", "por", "se", "eu", "meu", "minha", "qual",
    }
)


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Hashed bag-of-words: each non-stopword token increments one bucket
    chosen by its SHA-256 digest. Deterministic across processes, all
    components non-negative, and texts sharing words get a positive
    cosine similarity. NOT for production use.
    """

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> np.ndarray:
        """Generate deterministic pseudo-embedding from token hashes."""
        vector = np.zeros(self._dimensions, dtype=np.float32)
        for token in _TOKEN_RE.findall(text.lower()):
            if token in _STOPWORDS:
                continue
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            vector[int.from_bytes(digest[:8], "big") % self._dimensions] += 1.0
        return vector


def fallback_vector(dimensions: int, seed: int | None = None) -> np.ndarray:
    """
    Pseudo-random stand-in used when no embedding backend is reachable.

    Same length D as a genuine embedding so every similarity stays defined.
    Components are uniform in [0, 1).
    """
    rng = np.random.default_rng(seed)
    return rng.random(dimensions, dtype=np.float32)


# ---------------------------------------------------------------------------
# RESULT TYPES
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingResult:
    """A genuine embedding."""

    vector: np.ndarray


@dataclass
class EmbeddingError:
    """Why an embedding could not be produced."""

    kind: Literal["unavailable", "malformed", "empty_input"]
    error_message: str


def try_embed(provider: EmbeddingProvider, text: str) -> EmbeddingResult | EmbeddingError:
    """
    Call the provider and validate the vector against its declared dimension.

    Never raises for backend problems: those come back as EmbeddingError.
    """
    if not isinstance(text, str) or not text.strip():
        return EmbeddingError(kind="empty_input", error_message="Cannot embed empty text")

    try:
        vector = np.asarray(provider.embed(text), dtype=np.float32)
    except EmbeddingUnavailable as e:
        return EmbeddingError(kind="unavailable", error_message=e.message)

    if vector.ndim != 1 or vector.shape[0] != provider.dimensions:
        return EmbeddingError(
            kind="malformed",
            error_message=f"Expected {provider.dimensions} components, got shape {vector.shape}",
        )
    if not np.all(np.isfinite(vector)):
        return EmbeddingError(kind="malformed", error_message="Embedding contains NaN or inf")

    return EmbeddingResult(vector=vector)


def get_embedding_provider(
    use_mock: bool = False,
    model: str = "text-embedding-3-small",
    dimensions: int = DEFAULT_DIMENSIONS,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        use_mock: If True, return MockEmbeddings (for testing)
        model: OpenAI embedding model name
        dimensions: Fixed dimensionality D shared by the whole system
    """
    if use_mock:
        return MockEmbeddings(dimensions=dimensions)
    return OpenAIEmbeddings(model=model, dimensions=dimensions)
