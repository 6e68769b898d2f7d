"""
Graph construction with dependency injection.

The graph is just WIRING - all logic lives in nodes.

Graph structure:
START -> embed_query -> search_store -> synthesize_answer -> END
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langgraph.graph import END, StateGraph

from medical_rag_pipeline.pipeline.nodes import (
    create_embed_node,
    create_search_node,
    create_synthesize_node,
)
from medical_rag_pipeline.pipeline.state import PipelineStage, PipelineState

if TYPE_CHECKING:
    from medical_rag_pipeline.core import EmbeddingProvider, VectorStore
    from medical_rag_pipeline.generation import AnswerSynthesizer

EMBED_NODE = "embed_query"
SEARCH_NODE = "search_store"
SYNTHESIZE_NODE = "synthesize_answer"

# Stage the request enters once a node has finished
STAGE_AFTER: dict[str, PipelineStage] = {
    EMBED_NODE: PipelineStage.SEARCHING,
    SEARCH_NODE: PipelineStage.SYNTHESIZING,
    SYNTHESIZE_NODE: PipelineStage.COMPLETED,
}


def build_pipeline_graph(
    embeddings: EmbeddingProvider,
    store: VectorStore,
    synthesizer: AnswerSynthesizer,
    top_k: int = 5,
    min_score: float = 0.7,
):
    """
    Build the retrieval workflow with injected dependencies.

    Args:
        embeddings: Provider for the query embedding
        store: VectorStore implementation for retrieval
        synthesizer: Grounded answer synthesizer
        top_k: Results ranked per query
        min_score: Similarity threshold for reported sources

    Returns:
        Compiled StateGraph ready for invocation

    Example:
        embeddings = MockEmbeddings()
        store = InMemoryVectorStore(embeddings)
        graph = build_pipeline_graph(embeddings, store, AnswerSynthesizer(MockGeneration()))
    """
    workflow = StateGraph(PipelineState)

    workflow.add_node(EMBED_NODE, create_embed_node(embeddings))
    workflow.add_node(SEARCH_NODE, create_search_node(store, top_k=top_k, min_score=min_score))
    workflow.add_node(SYNTHESIZE_NODE, create_synthesize_node(synthesizer))

    workflow.set_entry_point(EMBED_NODE)
    workflow.add_edge(EMBED_NODE, SEARCH_NODE)
    workflow.add_edge(SEARCH_NODE, SYNTHESIZE_NODE)
    workflow.add_edge(SYNTHESIZE_NODE, END)

    return workflow.compile()
