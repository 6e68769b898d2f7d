"""
Pipeline nodes - isolated, testable functions.

Every node has dependencies, so each is created by a factory:
create_X_node(deps) -> node_fn. Nodes can be unit-tested by calling the
returned function with a hand-built state dict.
"""

from medical_rag_pipeline.pipeline.nodes.embed import create_embed_node
from medical_rag_pipeline.pipeline.nodes.search import create_search_node, select_sources
from medical_rag_pipeline.pipeline.nodes.synthesize import create_synthesize_node

__all__ = [
    "create_embed_node",
    "create_search_node",
    "create_synthesize_node",
    "select_sources",
]
