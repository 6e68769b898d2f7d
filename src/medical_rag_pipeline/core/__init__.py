"""
Core module - shared protocols, errors and configuration.

USAGE:
------
from medical_rag_pipeline.core import VectorStore, EmbeddingProvider

class MyVectorStore:
    '''Implements VectorStore protocol.'''
    ...
"""

from medical_rag_pipeline.core.config import (
    PipelineConfig,
    get_config,
    reset_config,
)
from medical_rag_pipeline.core.errors import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingUnavailable,
    GenerationUnavailable,
    InvalidQuery,
    MedicalRAGError,
    PipelineFailure,
    ServiceInitializationError,
)
from medical_rag_pipeline.core.protocols import (
    # Protocols
    AuditSink,
    EmbeddingProvider,
    GenerationBackend,
    VectorStore,
    # Data classes
    SearchResult,
)

__all__ = [
    # Config
    "PipelineConfig",
    "get_config",
    "reset_config",
    # Errors
    "ConfigurationError",
    "DimensionMismatchError",
    "EmbeddingUnavailable",
    "GenerationUnavailable",
    "InvalidQuery",
    "MedicalRAGError",
    "PipelineFailure",
    "ServiceInitializationError",
    # Protocols
    "AuditSink",
    "EmbeddingProvider",
    "GenerationBackend",
    "VectorStore",
    # Data classes
    "SearchResult",
]
