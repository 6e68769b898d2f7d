"""
Unit Tests for Embedding Providers

Tests the mock provider, the fallback vector, try_embed() result
branching and the OpenAI provider with a mocked client.
"""

import numpy as np
import pytest
from unittest.mock import MagicMock, patch

from openai import OpenAIError

from medical_rag_pipeline.core.errors import EmbeddingUnavailable
from medical_rag_pipeline.embeddings import (
    EmbeddingError,
    EmbeddingResult,
    MockEmbeddings,
    OpenAIEmbeddings,
    fallback_vector,
    get_embedding_provider,
    try_embed,
)
from medical_rag_pipeline.retrieval.similarity import cosine_similarity


# ---------------------------------------------------------------------------
# MOCK EMBEDDINGS
# ---------------------------------------------------------------------------


class TestMockEmbeddings:
    """Test the hashed bag-of-words test double."""

    def test_dimensions(self):
        vector = MockEmbeddings(dimensions=128).embed("blood pressure")
        assert vector.shape == (128,)

    def test_deterministic(self):
        a = MockEmbeddings(64).embed("what is hypertension")
        b = MockEmbeddings(64).embed("what is hypertension")
        np.testing.assert_array_equal(a, b)

    def test_non_negative(self):
        vector = MockEmbeddings(64).embed("fever, cough and sore throat for 3 days")
        assert np.all(vector >= 0)

    def test_shared_words_give_positive_similarity(self):
        provider = MockEmbeddings(256)
        a = provider.embed("Hypertension is blood pressure above 140/90")
        b = provider.embed("what is hypertension")
        assert cosine_similarity(a, b) > 0

    def test_case_insensitive(self):
        provider = MockEmbeddings(64)
        np.testing.assert_array_equal(provider.embed("Diabetes"), provider.embed("diabetes"))

    def test_stopwords_only_gives_zero_vector(self):
        assert not np.any(MockEmbeddings(64).embed("what is the"))


# ---------------------------------------------------------------------------
# FALLBACK VECTOR
# ---------------------------------------------------------------------------


class TestFallbackVector:
    """Test the degraded-mode vector."""

    def test_dimension(self):
        assert fallback_vector(1536).shape == (1536,)

    def test_in_unit_interval(self):
        vector = fallback_vector(500)
        assert np.all(vector >= 0.0)
        assert np.all(vector < 1.0)

    def test_seeded_is_reproducible(self):
        np.testing.assert_array_equal(fallback_vector(16, seed=3), fallback_vector(16, seed=3))


# ---------------------------------------------------------------------------
# TRY_EMBED
# ---------------------------------------------------------------------------


class TestTryEmbed:
    """Test result-union wrapping of provider calls."""

    def test_success(self):
        outcome = try_embed(MockEmbeddings(32), "headache")
        assert isinstance(outcome, EmbeddingResult)
        assert outcome.vector.dtype == np.float32

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_empty_input(self, text):
        provider = MagicMock(dimensions=4)
        outcome = try_embed(provider, text)

        assert isinstance(outcome, EmbeddingError)
        assert outcome.kind == "empty_input"
        provider.embed.assert_not_called()

    def test_unavailable(self):
        provider = MagicMock(dimensions=4)
        provider.embed.side_effect = EmbeddingUnavailable("no key")

        outcome = try_embed(provider, "headache")

        assert isinstance(outcome, EmbeddingError)
        assert outcome.kind == "unavailable"
        assert outcome.error_message == "no key"

    def test_wrong_dimension_is_malformed(self):
        provider = MagicMock(dimensions=4)
        provider.embed.return_value = np.ones(3)

        outcome = try_embed(provider, "headache")

        assert isinstance(outcome, EmbeddingError)
        assert outcome.kind == "malformed"

    def test_nan_is_malformed(self):
        provider = MagicMock(dimensions=2)
        provider.embed.return_value = np.array([1.0, np.nan])

        assert try_embed(provider, "headache").kind == "malformed"

    def test_unexpected_errors_propagate(self):
        provider = MagicMock(dimensions=2)
        provider.embed.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            try_embed(provider, "headache")


# ---------------------------------------------------------------------------
# OPENAI PROVIDER
# ---------------------------------------------------------------------------


class TestOpenAIEmbeddings:
    """Test OpenAIEmbeddings with the client mocked."""

    def test_missing_key_raises_unavailable(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        provider = OpenAIEmbeddings()

        with pytest.raises(EmbeddingUnavailable):
            provider.embed("headache")

    def test_embed_calls_client(self):
        provider = OpenAIEmbeddings(api_key="sk-test", dimensions=3)
        client = MagicMock()
        client.embeddings.create.return_value.data = [MagicMock(embedding=[0.1, 0.2, 0.3])]

        with patch("medical_rag_pipeline.embeddings.providers.OpenAI", return_value=client) as ctor:
            vector = provider.embed("headache")

        assert vector.tolist() == pytest.approx([0.1, 0.2, 0.3])
        ctor.assert_called_once()
        assert ctor.call_args.kwargs["max_retries"] == 0
        client.embeddings.create.assert_called_once_with(
            input="headache", model="text-embedding-3-small", dimensions=3
        )

    def test_legacy_model_omits_dimensions(self):
        provider = OpenAIEmbeddings(model="text-embedding-ada-002", api_key="sk-test")
        client = MagicMock()
        client.embeddings.create.return_value.data = [MagicMock(embedding=[0.0] * 1536)]

        with patch("medical_rag_pipeline.embeddings.providers.OpenAI", return_value=client):
            provider.embed("headache")

        assert "dimensions" not in client.embeddings.create.call_args.kwargs

    def test_api_error_becomes_unavailable(self):
        provider = OpenAIEmbeddings(api_key="sk-test")
        client = MagicMock()
        client.embeddings.create.side_effect = OpenAIError("connection reset")

        with patch("medical_rag_pipeline.embeddings.providers.OpenAI", return_value=client):
            with pytest.raises(EmbeddingUnavailable) as exc_info:
                provider.embed("headache")

        assert isinstance(exc_info.value.cause, OpenAIError)

    def test_empty_response_becomes_unavailable(self):
        provider = OpenAIEmbeddings(api_key="sk-test")
        client = MagicMock()
        client.embeddings.create.return_value.data = []

        with patch("medical_rag_pipeline.embeddings.providers.OpenAI", return_value=client):
            with pytest.raises(EmbeddingUnavailable):
                provider.embed("headache")


class TestGetEmbeddingProvider:
    def test_mock(self):
        provider = get_embedding_provider(use_mock=True, dimensions=8)
        assert isinstance(provider, MockEmbeddings)
        assert provider.dimensions == 8

    def test_openai(self):
        provider = get_embedding_provider(use_mock=False)
        assert isinstance(provider, OpenAIEmbeddings)
