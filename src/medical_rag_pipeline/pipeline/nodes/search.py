"""
Search node - ranks stored documents against the query vector.

THRESHOLD POLICY:
-----------------
All top-k results stay in state. Reported sources are the results whose
similarity reaches min_score. When none does, sources fall back to the
best available results, unfiltered, and the state is marked
below_threshold so the response carries a low-confidence warning.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from medical_rag_pipeline.core import SearchResult, VectorStore
    from medical_rag_pipeline.pipeline.state import PipelineState

logger = logging.getLogger(__name__)


def select_sources(results: list[SearchResult], min_score: float) -> tuple[list[SearchResult], bool]:
    """
    Apply the minimum-score threshold to ranked results.

    Returns:
        (sources, below_threshold) - below_threshold is True when results
        exist but none reached min_score
    """
    qualifying = [r for r in results if r.similarity >= min_score]
    if qualifying:
        return qualifying, False
    if not results:
        return [], False
    return list(results), True


def create_search_node(
    store: VectorStore,
    top_k: int = 5,
    min_score: float = 0.7,
) -> Callable[[PipelineState], dict]:
    """
    Factory that creates a search node with an injected store.

    Args:
        store: Any VectorStore implementation
        top_k: Number of results to rank
        min_score: Similarity a result needs to count as a source

    Returns:
        A node function compatible with LangGraph
    """

    def search_store(state: PipelineState) -> dict:
        """
        Reads from state:
        - query_vector: Output of the embed node

        Writes to state:
        - results, sources, below_threshold, search_latency_ms
        """
        start = time.time()
        query = state["query"]

        results = store.search(state["query_vector"], top_k=top_k)
        sources, below_threshold = select_sources(results, min_score)

        if not results:
            logger.info(f"Query {query.id}: knowledge base returned no documents")
        elif below_threshold:
            logger.info(
                f"Query {query.id}: no result reached {min_score:.2f} "
                f"(best {results[0].similarity:.3f}); using best available"
            )
        for rank, result in enumerate(results, start=1):
            logger.debug(f"  {rank}. {result.document.title} (similarity: {result.similarity:.3f})")

        return {
            "results": results,
            "sources": sources,
            "below_threshold": below_threshold,
            "search_latency_ms": (time.time() - start) * 1000,
        }

    return search_store
