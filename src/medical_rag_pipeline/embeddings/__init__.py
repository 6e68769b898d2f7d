"""
Embeddings module - text embedding generation.

1. Protocol (EmbeddingProvider) defines the interface
2. Production implementation (OpenAIEmbeddings)
3. Test double (MockEmbeddings) for fast testing
4. Factory function (get_embedding_provider)
5. Degraded mode (try_embed + fallback_vector)
"""

from medical_rag_pipeline.embeddings.providers import (
    DEFAULT_DIMENSIONS,
    EmbeddingError,
    EmbeddingProvider,
    EmbeddingResult,
    MockEmbeddings,
    OpenAIEmbeddings,
    fallback_vector,
    get_embedding_provider,
    try_embed,
)

__all__ = [
    "DEFAULT_DIMENSIONS",
    "EmbeddingError",
    "EmbeddingProvider",
    "EmbeddingResult",
    "MockEmbeddings",
    "OpenAIEmbeddings",
    "fallback_vector",
    "get_embedding_provider",
    "try_embed",
]
