"""
Pipeline configuration.

Loads retrieval, embedding and generation settings from environment
variables. Every vector in the system shares `embedding_dim`, so it is
fixed here and handed to both the embedding provider and the store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from medical_rag_pipeline.core.errors import ConfigurationError

_TRUTHY = ("true", "1", "yes")


def env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in _TRUTHY


def _env_number(name: str, default: str, cast: type):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a {cast.__name__}, got {raw!r}", cause=e) from e


@dataclass
class PipelineConfig:
    """Configuration for the medical retrieval pipeline.

    Environment Variables:
        EMBEDDING_MODEL: Embedding model name (default: text-embedding-3-small)
        EMBEDDING_DIM: Vector dimensionality D (default: 1536)
        GENERATION_MODEL: Chat model for answer synthesis (default: gpt-4o-mini)
        GENERATION_TEMPERATURE / GENERATION_TOP_P / GENERATION_MAX_TOKENS
        RAG_TOP_K: Results per search (default: 5)
        RAG_MIN_SCORE: Similarity a result needs to be reported as a source (default: 0.7)
        RAG_MAX_CONTEXT_DOCUMENTS: Documents passed to the generator (default: 5)
        RAG_EXCERPT_CHARS: Length of source excerpts in responses (default: 200)
        USE_MOCK_EMBEDDINGS / USE_MOCK_GENERATION: Use in-process test doubles
    """

    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536

    generation_model: str = "gpt-4o-mini"
    temperature: float = 0.3
    top_p: float = 0.8
    max_tokens: int = 1000

    top_k: int = 5
    min_score: float = 0.7
    max_context_documents: int = 5
    excerpt_chars: int = 200

    use_mock_embeddings: bool = False
    use_mock_generation: bool = False

    def __post_init__(self) -> None:
        if self.embedding_dim <= 0:
            raise ConfigurationError("embedding_dim must be positive")
        if self.top_k <= 0:
            raise ConfigurationError("top_k must be a positive integer")

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Load config from environment variables."""
        return cls(
            embedding_model=os.environ.get("EMBEDDING_MODEL", "text-embedding-3-small"),
            embedding_dim=_env_number("EMBEDDING_DIM", "1536", int),
            generation_model=os.environ.get("GENERATION_MODEL", "gpt-4o-mini"),
            temperature=_env_number("GENERATION_TEMPERATURE", "0.3", float),
            top_p=_env_number("GENERATION_TOP_P", "0.8", float),
            max_tokens=_env_number("GENERATION_MAX_TOKENS", "1000", int),
            top_k=_env_number("RAG_TOP_K", "5", int),
            min_score=_env_number("RAG_MIN_SCORE", "0.7", float),
            max_context_documents=_env_number("RAG_MAX_CONTEXT_DOCUMENTS", "5", int),
            excerpt_chars=_env_number("RAG_EXCERPT_CHARS", "200", int),
            use_mock_embeddings=env_flag("USE_MOCK_EMBEDDINGS"),
            use_mock_generation=env_flag("USE_MOCK_GENERATION"),
        )


# Global config singleton
_config: PipelineConfig | None = None


def get_config() -> PipelineConfig:
    """Get the global pipeline config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = PipelineConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
