"""
Pipeline state definition - the data flowing through the LangGraph.

Separated because the state schema changes for different reasons than
node logic or graph structure. Each node reads from and writes to
specific state keys; the state lives only as long as one request.
"""

from __future__ import annotations

from enum import Enum
from typing import TypedDict

import numpy as np

from medical_rag_pipeline.core.protocols import SearchResult
from medical_rag_pipeline.schemas.medical import MedicalDocument, MedicalQuery


class PipelineStage(str, Enum):
    """
    Per-request state machine.

    RECEIVED -> EMBEDDING -> SEARCHING -> SYNTHESIZING -> COMPLETED,
    or FAILED from any non-terminal stage.
    """

    RECEIVED = "received"
    EMBEDDING = "embedding"
    SEARCHING = "searching"
    SYNTHESIZING = "synthesizing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.COMPLETED, PipelineStage.FAILED)


class PipelineState(TypedDict):
    """
    State that flows through the LangGraph.

    Input fields are set at invocation time.
    Intermediate fields are populated by nodes.
    Output fields contain the final result.
    """

    # -------------------------------------------------------------------------
    # INPUT (set at invocation)
    # -------------------------------------------------------------------------
    query: MedicalQuery

    # -------------------------------------------------------------------------
    # INTERMEDIATE (populated by nodes)
    # -------------------------------------------------------------------------
    query_vector: np.ndarray | None
    embedding_fallback: bool
    results: list[SearchResult]
    sources: list[SearchResult]
    below_threshold: bool

    # -------------------------------------------------------------------------
    # OUTPUT (final result)
    # -------------------------------------------------------------------------
    answer: str | None
    generation_fallback: bool

    # -------------------------------------------------------------------------
    # METRICS
    # -------------------------------------------------------------------------
    embedding_latency_ms: float
    search_latency_ms: float
    synthesis_latency_ms: float


def create_initial_state(query: MedicalQuery) -> PipelineState:
    """Create the initial state for one graph invocation."""
    return PipelineState(
        query=query,
        query_vector=None,
        embedding_fallback=False,
        results=[],
        sources=[],
        below_threshold=False,
        answer=None,
        generation_fallback=False,
        embedding_latency_ms=0.0,
        search_latency_ms=0.0,
        synthesis_latency_ms=0.0,
    )


def source_documents(state: PipelineState) -> list[MedicalDocument]:
    """Documents reported as sources, most relevant first."""
    return [result.document for result in state["sources"]]
