"""
Pipeline module - the query request/response cycle.

1. State (PipelineState, PipelineStage) - data flowing through the graph
2. Nodes - isolated, testable step functions built by factories
3. Graph - LangGraph wiring: embed_query -> search_store -> synthesize_answer
4. QueryOrchestrator - validation, triage, response assembly, audit
5. MedicalRAGService - once-only initialization and request envelopes
"""

from medical_rag_pipeline.pipeline.graph import build_pipeline_graph
from medical_rag_pipeline.pipeline.orchestrator import (
    EmergencySignal,
    QueryOrchestrator,
    compute_confidence,
    validate_query_text,
)
from medical_rag_pipeline.pipeline.service import (
    InitState,
    MedicalRAGService,
    get_medical_rag_service,
    reset_medical_rag_service,
)
from medical_rag_pipeline.pipeline.state import (
    PipelineStage,
    PipelineState,
    create_initial_state,
)

__all__ = [
    "build_pipeline_graph",
    "EmergencySignal",
    "QueryOrchestrator",
    "compute_confidence",
    "validate_query_text",
    "InitState",
    "MedicalRAGService",
    "get_medical_rag_service",
    "reset_medical_rag_service",
    "PipelineStage",
    "PipelineState",
    "create_initial_state",
]
