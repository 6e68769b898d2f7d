"""
Core protocols defining contracts for the entire pipeline.

All infrastructure components implement these protocols, enabling
dependency injection and easy testing.

PATTERN: Protocol -> Production impl -> Test double -> Factory
- EmbeddingProvider: OpenAIEmbeddings / MockEmbeddings / get_embedding_provider
- VectorStore: InMemoryVectorStore / get_vector_store
- GenerationBackend: OpenAIGeneration / MockGeneration / get_generation_backend
- AuditSink: LoggingAuditSink, TracingAuditSink / InMemoryAuditSink
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from medical_rag_pipeline.schemas.medical import AuditRecord, MedicalDocument


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    `embed` returns exactly `dimensions` floats or raises
    EmbeddingUnavailable. It never returns a partial vector.
    """

    @property
    def dimensions(self) -> int:
        """The fixed dimensionality D of every vector this provider returns."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...


# ---------------------------------------------------------------------------
# VECTOR STORE PROTOCOL
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchResult:
    """A stored document paired with its cosine similarity to the query."""

    document: MedicalDocument
    similarity: float


@runtime_checkable
class VectorStore(Protocol):
    """
    Contract for vector similarity search.

    `index` is the only mutator. `search` must never observe a partially
    applied `index` call.
    """

    @property
    def dimensions(self) -> int:
        ...

    def index(self, documents: Sequence[MedicalDocument]) -> int:
        """Embed and store documents, returning how many were indexed."""
        ...

    def search(self, query_vector: np.ndarray, top_k: int = 5) -> list[SearchResult]:
        """Return at most top_k results by descending similarity."""
        ...

    def __len__(self) -> int:
        ...


# ---------------------------------------------------------------------------
# GENERATION BACKEND PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class GenerationBackend(Protocol):
    """
    Contract for text generation.

    Implementations raise GenerationUnavailable on any failure, including
    an empty completion.
    """

    def generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        top_p: float,
        max_tokens: int,
    ) -> str:
        ...


# ---------------------------------------------------------------------------
# AUDIT SINK PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class AuditSink(Protocol):
    """Append-only destination for audit records."""

    def record(self, entry: AuditRecord) -> None:
        ...
