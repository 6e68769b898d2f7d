"""
Vector store implementation.

Pattern: Protocol -> Implementation -> Factory

This module contains:
1. InMemoryVectorStore - in-process store with cosine similarity search
2. get_vector_store() - Factory function

CONCURRENCY:
------------
Many readers, rare writer, no observed partial state. The store holds one
immutable snapshot (entries + stacked embedding matrix). Searches read the
snapshot reference once and never lock. index() embeds outside the lock,
then merges into the latest snapshot and swaps the reference under a
writer lock, so concurrent writers serialize and readers see either the
old snapshot or the new one.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from medical_rag_pipeline.core import EmbeddingProvider, SearchResult
from medical_rag_pipeline.embeddings import EmbeddingError, try_embed
from medical_rag_pipeline.retrieval.document import IndexedEntry
from medical_rag_pipeline.retrieval.similarity import cosine_similarities, top_k_indices
from medical_rag_pipeline.schemas.medical import MedicalDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Immutable view of the store contents at one point in time."""

    entries: tuple[IndexedEntry, ...]
    matrix: np.ndarray

    @classmethod
    def build(cls, entries: Iterable[IndexedEntry], dimensions: int) -> "_Snapshot":
        entries = tuple(entries)
        if entries:
            matrix = np.vstack([entry.embedding for entry in entries])
        else:
            matrix = np.zeros((0, dimensions), dtype=np.float32)
        matrix.setflags(write=False)
        return cls(entries=entries, matrix=matrix)


class InMemoryVectorStore:
    """
    In-memory vector store keyed by document id.

    Embeddings come from the injected provider. A document whose embedding
    fails is logged and skipped; a store with zero documents is valid and
    simply returns no results.
    """

    def __init__(self, embeddings: EmbeddingProvider):
        """
        Initialize with injected embedding provider.

        Args:
            embeddings: Embedding provider for generating vectors
        """
        self._embeddings = embeddings
        self._write_lock = threading.Lock()
        self._snapshot = _Snapshot.build((), embeddings.dimensions)

    @property
    def dimensions(self) -> int:
        return self._embeddings.dimensions

    def _embed_documents(self, documents: Sequence[MedicalDocument]) -> dict[str, IndexedEntry]:
        entries: dict[str, IndexedEntry] = {}
        for doc in documents:
            outcome = try_embed(self._embeddings, doc.content)
            if isinstance(outcome, EmbeddingError):
                logger.warning(
                    f"Skipping document {doc.id}: embedding {outcome.kind} ({outcome.error_message})"
                )
                continue
            entries[doc.id] = IndexedEntry(document=doc, embedding=outcome.vector.copy())
            logger.debug(f"Embedded document {doc.id} ({doc.title})")
        return entries

    def index(self, documents: Sequence[MedicalDocument]) -> int:
        """
        Embed and store documents.

        Re-indexing an existing id replaces its entry in place
        (last write wins). Returns the number of documents indexed.
        """
        new_entries = self._embed_documents(documents)

        with self._write_lock:
            merged = {entry.id: entry for entry in self._snapshot.entries}
            merged.update(new_entries)
            self._snapshot = _Snapshot.build(merged.values(), self.dimensions)
            total = len(merged)

        skipped = len(documents) - len(new_entries)
        logger.info(f"Indexed {len(new_entries)} documents ({skipped} skipped, {total} total)")
        return len(new_entries)

    def rebuild(self, documents: Sequence[MedicalDocument]) -> int:
        """Replace the whole store with `documents` in one swap."""
        new_entries = self._embed_documents(documents)
        with self._write_lock:
            self._snapshot = _Snapshot.build(new_entries.values(), self.dimensions)
        logger.info(f"Rebuilt store with {len(new_entries)} documents")
        return len(new_entries)

    def clear(self) -> None:
        """Drop every entry."""
        with self._write_lock:
            self._snapshot = _Snapshot.build((), self.dimensions)

    def search(self, query_vector: np.ndarray, top_k: int = 5) -> list[SearchResult]:
        """
        Rank every stored document against `query_vector`.

        Returns at most top_k results, highest similarity first, ties in
        insertion order. An empty store yields an empty list.
        """
        if top_k <= 0:
            raise ValueError("top_k must be a positive integer")

        snapshot = self._snapshot
        if not snapshot.entries:
            return []

        scores = cosine_similarities(query_vector, snapshot.matrix)
        return [
            SearchResult(document=snapshot.entries[i].document, similarity=float(scores[i]))
            for i in top_k_indices(scores, top_k)
        ]

    def get(self, doc_id: str) -> MedicalDocument | None:
        """Look up a stored document by id."""
        for entry in self._snapshot.entries:
            if entry.id == doc_id:
                return entry.document
        return None

    def stats(self) -> dict:
        """Document count, dimensionality and per-speciality breakdown."""
        entries = self._snapshot.entries
        specialities = Counter(e.document.metadata.speciality or "unspecified" for e in entries)
        return {
            "documents": len(entries),
            "dimensions": self.dimensions,
            "specialities": dict(specialities),
        }

    def __len__(self) -> int:
        return len(self._snapshot.entries)

    def __contains__(self, doc_id: object) -> bool:
        return any(entry.id == doc_id for entry in self._snapshot.entries)


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_vector_store(
    embeddings: EmbeddingProvider | None = None,
    use_mock: bool | None = None,
) -> InMemoryVectorStore:
    """
    Factory function to get a vector store.

    Args:
        embeddings: Embedding provider (built from config if not provided)
        use_mock: Override USE_MOCK_EMBEDDINGS when building the provider

    Returns:
        VectorStore implementation
    """
    if embeddings is None:
        from medical_rag_pipeline.core.config import get_config
        from medical_rag_pipeline.embeddings import get_embedding_provider

        config = get_config()
        embeddings = get_embedding_provider(
            use_mock=config.use_mock_embeddings if use_mock is None else use_mock,
            model=config.embedding_model,
            dimensions=config.embedding_dim,
        )

    return InMemoryVectorStore(embeddings)
