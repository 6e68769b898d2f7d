"""
Retrieval module - vector similarity search for RAG.

This module provides:
- IndexedEntry: A document paired with its embedding
- cosine_similarity / cosine_similarities / top_k_indices: Ranking math
- InMemoryVectorStore: Snapshot-swap in-process store
- get_vector_store(): Factory function

ARCHITECTURE:
-------------
Following the pattern from the embeddings module:
1. Protocol defines the contract (in core.protocols)
2. Implementation (InMemoryVectorStore)
3. Factory function for instantiation
4. Seed data kept apart from infrastructure
"""

from medical_rag_pipeline.retrieval.document import IndexedEntry
from medical_rag_pipeline.retrieval.similarity import (
    cosine_similarities,
    cosine_similarity,
    top_k_indices,
)
from medical_rag_pipeline.retrieval.store import InMemoryVectorStore, get_vector_store
from medical_rag_pipeline.retrieval.seeds import get_medical_documents, seed_vector_store

__all__ = [
    # Entry
    "IndexedEntry",
    # Ranking
    "cosine_similarity",
    "cosine_similarities",
    "top_k_indices",
    # Store
    "InMemoryVectorStore",
    "get_vector_store",
    # Seeds
    "get_medical_documents",
    "seed_vector_store",
]
