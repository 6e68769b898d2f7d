"""
Embed node - turns the query text into a vector.

Never aborts the request: when the provider fails, the node substitutes
a fallback vector of the same dimension and flags it in state so the
audit record shows the confidence figure was not computed from a real
embedding.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from medical_rag_pipeline.embeddings import EmbeddingError, fallback_vector, try_embed

if TYPE_CHECKING:
    from medical_rag_pipeline.core import EmbeddingProvider
    from medical_rag_pipeline.pipeline.state import PipelineState

logger = logging.getLogger(__name__)


def create_embed_node(embeddings: EmbeddingProvider) -> Callable[[PipelineState], dict]:
    """
    Factory that creates an embed node with an injected provider.

    Args:
        embeddings: Any EmbeddingProvider implementation

    Returns:
        A node function compatible with LangGraph
    """

    def embed_query(state: PipelineState) -> dict:
        """
        Reads from state:
        - query: The validated query

        Writes to state:
        - query_vector, embedding_fallback, embedding_latency_ms
        """
        start = time.time()
        query = state["query"]

        outcome = try_embed(embeddings, query.text)
        if isinstance(outcome, EmbeddingError):
            logger.warning(
                f"Query {query.id}: embedding {outcome.kind} ({outcome.error_message}); "
                "using fallback vector"
            )
            vector = fallback_vector(embeddings.dimensions)
            used_fallback = True
        else:
            vector = outcome.vector
            used_fallback = False

        return {
            "query_vector": vector,
            "embedding_fallback": used_fallback,
            "embedding_latency_ms": (time.time() - start) * 1000,
        }

    return embed_query
