"""
Unit Tests for the In-Memory Vector Store

Tests indexing, ranking, replacement semantics and snapshot isolation.

PATTERNS:
---------
1. Embeddings mocked with MagicMock so vectors are exact
2. Search tested with hand-picked query vectors
3. Failure paths (unavailable / malformed embeddings) skip, never raise
"""

import threading

import numpy as np
import pytest
from unittest.mock import MagicMock

from medical_rag_pipeline.core import DimensionMismatchError, EmbeddingUnavailable, SearchResult
from medical_rag_pipeline.embeddings import MockEmbeddings
from medical_rag_pipeline.retrieval import (
    InMemoryVectorStore,
    get_medical_documents,
    get_vector_store,
    seed_vector_store,
)
from medical_rag_pipeline.schemas.medical import DocumentMetadata, MedicalDocument


def make_doc(doc_id: str, content: str, speciality: str | None = "General") -> MedicalDocument:
    return MedicalDocument(
        id=doc_id,
        content=content,
        metadata=DocumentMetadata(source="Test Source", speciality=speciality, condition=doc_id),
    )


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embeddings():
    """3-dimensional embeddings keyed on content keywords."""
    embeddings = MagicMock()
    embeddings.dimensions = 3

    def mock_embed(text):
        text = text.lower()
        if "mixed" in text:
            return np.array([1.0, 1.0, 0.0])
        if "heart" in text:
            return np.array([1.0, 0.0, 0.0])
        if "sugar" in text:
            return np.array([0.0, 1.0, 0.0])
        return np.array([0.0, 0.0, 1.0])

    embeddings.embed.side_effect = mock_embed
    return embeddings


@pytest.fixture
def store(mock_embeddings):
    store = InMemoryVectorStore(mock_embeddings)
    store.index([
        make_doc("cardio", "Heart disease overview", speciality="Cardiology"),
        make_doc("endo", "Blood sugar control", speciality="Endocrinology"),
        make_doc("both", "Mixed heart and sugar risks", speciality="Cardiology"),
    ])
    return store


# ---------------------------------------------------------------------------
# INDEXING
# ---------------------------------------------------------------------------


class TestIndex:
    """Test InMemoryVectorStore.index()."""

    def test_index_returns_count(self, mock_embeddings):
        store = InMemoryVectorStore(mock_embeddings)
        assert store.index([make_doc("a", "heart"), make_doc("b", "sugar")]) == 2
        assert len(store) == 2

    def test_reindex_same_id_replaces(self, store):
        """Re-indexing an id replaces the entry; size unchanged."""
        store.index([make_doc("cardio", "Now about sugar")])

        assert len(store) == 3
        assert store.get("cardio").content == "Now about sugar"
        top = store.search(np.array([0.0, 1.0, 0.0]), top_k=1)[0]
        assert top.document.id == "cardio"

    def test_reindex_keeps_original_position(self, store):
        store.index([make_doc("endo", "heart again")])
        ids = [r.document.id for r in store.search(np.array([1.0, 0.0, 0.0]), top_k=3)]
        assert ids == ["cardio", "endo", "both"]

    def test_duplicate_ids_in_one_batch_last_wins(self, mock_embeddings):
        store = InMemoryVectorStore(mock_embeddings)
        store.index([make_doc("x", "heart"), make_doc("x", "sugar")])

        assert len(store) == 1
        assert store.get("x").content == "sugar"

    def test_unavailable_embedding_is_skipped(self, mock_embeddings):
        def flaky(text):
            if "broken" in text:
                raise EmbeddingUnavailable("backend down")
            return np.array([1.0, 0.0, 0.0])

        mock_embeddings.embed.side_effect = flaky
        store = InMemoryVectorStore(mock_embeddings)

        indexed = store.index([make_doc("ok", "heart"), make_doc("bad", "broken passage")])

        assert indexed == 1
        assert "ok" in store
        assert "bad" not in store

    def test_wrong_dimension_embedding_is_skipped(self, mock_embeddings):
        mock_embeddings.embed.side_effect = lambda text: np.array([1.0, 0.0])
        store = InMemoryVectorStore(mock_embeddings)

        assert store.index([make_doc("short", "heart")]) == 0
        assert len(store) == 0

    def test_all_failures_leave_valid_empty_store(self, mock_embeddings):
        mock_embeddings.embed.side_effect = EmbeddingUnavailable("down")
        store = InMemoryVectorStore(mock_embeddings)

        assert store.index([make_doc("a", "heart")]) == 0
        assert store.search(np.array([1.0, 0.0, 0.0]), top_k=5) == []

    def test_rebuild_replaces_everything(self, store):
        store.rebuild([make_doc("only", "sugar")])
        assert len(store) == 1
        assert "cardio" not in store

    def test_clear(self, store):
        store.clear()
        assert len(store) == 0


# ---------------------------------------------------------------------------
# SEARCH
# ---------------------------------------------------------------------------


class TestSearch:
    """Test InMemoryVectorStore.search()."""

    def test_returns_search_results(self, store):
        results = store.search(np.array([1.0, 0.0, 0.0]), top_k=5)
        assert all(isinstance(r, SearchResult) for r in results)

    def test_sorted_by_descending_similarity(self, store):
        results = store.search(np.array([1.0, 0.0, 0.0]), top_k=5)

        assert [r.document.id for r in results] == ["cardio", "both", "endo"]
        assert results[0].similarity == pytest.approx(1.0)
        assert results[1].similarity == pytest.approx(1 / np.sqrt(2))
        assert results[2].similarity == pytest.approx(0.0)

    @pytest.mark.parametrize("top_k", [1, 2, 3, 10])
    def test_at_most_min_top_k_n(self, store, top_k):
        results = store.search(np.array([0.2, 0.3, 0.4]), top_k=top_k)
        assert len(results) == min(top_k, 3)
        sims = [r.similarity for r in results]
        assert sims == sorted(sims, reverse=True)

    def test_ties_keep_insertion_order(self, mock_embeddings):
        store = InMemoryVectorStore(mock_embeddings)
        store.index([make_doc("first", "heart one"), make_doc("second", "heart two")])

        results = store.search(np.array([1.0, 0.0, 0.0]), top_k=2)

        assert [r.document.id for r in results] == ["first", "second"]

    def test_empty_store_returns_empty(self, mock_embeddings):
        store = InMemoryVectorStore(mock_embeddings)
        assert store.search(np.array([1.0, 0.0, 0.0]), top_k=5) == []

    def test_zero_query_vector_scores_zero(self, store):
        results = store.search(np.zeros(3), top_k=3)
        assert all(r.similarity == 0.0 for r in results)

    def test_dimension_mismatch_raises(self, store):
        with pytest.raises(DimensionMismatchError):
            store.search(np.ones(5), top_k=3)

    def test_non_positive_top_k_raises(self, store):
        with pytest.raises(ValueError):
            store.search(np.ones(3), top_k=0)

    def test_search_does_not_mutate(self, store):
        before = store.stats()
        store.search(np.array([1.0, 0.0, 0.0]), top_k=3)
        assert store.stats() == before

    def test_stored_embeddings_are_read_only(self, store):
        entries = store._snapshot.entries
        with pytest.raises(ValueError):
            entries[0].embedding[0] = 42.0


# ---------------------------------------------------------------------------
# CONCURRENCY
# ---------------------------------------------------------------------------


class TestSnapshotIsolation:
    """Searches never observe a partially applied index()."""

    def test_concurrent_search_sees_whole_batches(self, mock_embeddings):
        store = InMemoryVectorStore(mock_embeddings)
        store.index([make_doc(f"seed-{i}", "heart") for i in range(5)])

        batch_size = 10
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                n = len(store.search(np.array([1.0, 0.0, 0.0]), top_k=1000))
                if (n - 5) % batch_size != 0:
                    errors.append(n)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for b in range(20):
            store.index([make_doc(f"b{b}-{i}", "sugar") for i in range(batch_size)])
        stop.set()
        for t in threads:
            t.join()

        assert errors == []
        assert len(store) == 5 + 20 * batch_size


# ---------------------------------------------------------------------------
# STATS, SEEDS, FACTORY
# ---------------------------------------------------------------------------


class TestStatsAndSeeds:
    """Test store stats and the seed knowledge base."""

    def test_stats(self, store):
        stats = store.stats()
        assert stats["documents"] == 3
        assert stats["dimensions"] == 3
        assert stats["specialities"] == {"Cardiology": 2, "Endocrinology": 1}

    def test_seed_documents_have_unique_ids(self):
        docs = get_medical_documents()
        assert len(docs) == 5
        assert len({d.id for d in docs}) == len(docs)

    def test_seed_vector_store(self):
        store = InMemoryVectorStore(MockEmbeddings(dimensions=64))
        assert seed_vector_store(store) == 5
        assert "cardio-001" in store

    def test_factory_uses_given_embeddings(self, mock_embeddings):
        store = get_vector_store(embeddings=mock_embeddings)
        assert isinstance(store, InMemoryVectorStore)
        assert store.dimensions == 3

    def test_factory_mock_from_config(self, monkeypatch):
        from medical_rag_pipeline.core import reset_config

        monkeypatch.setenv("EMBEDDING_DIM", "32")
        reset_config()
        try:
            store = get_vector_store(use_mock=True)
            assert store.dimensions == 32
        finally:
            reset_config()
