"""
Semantic Conventions for Span Attributes

Attribute keys following OpenTelemetry GenAI conventions plus a custom
`rag.*` namespace for retrieval and triage metrics.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"  # "openai"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"  # "gpt-4o-mini"
GEN_AI_REQUEST_TEMPERATURE = "gen_ai.request.temperature"
GEN_AI_REQUEST_TOP_P = "gen_ai.request.top_p"
GEN_AI_REQUEST_MAX_TOKENS = "gen_ai.request.max_tokens"


# ---------------------------------------------------------------------------
# RAG NAMESPACE (custom)
# ---------------------------------------------------------------------------

# Query level
RAG_QUERY_ID = "rag.query.id"
RAG_QUERY_TEXT = "rag.query.text"  # only when PHOENIX_CAPTURE_QUERY_TEXT=true
RAG_PATIENT_ID = "rag.patient.id"
RAG_SESSION_ID = "rag.session.id"
RAG_STATUS = "rag.status"  # "completed", "failed", "invalid"

# Retrieval
RAG_TOP_K = "rag.top_k"
RAG_MIN_SCORE = "rag.min_score"
RAG_DOCUMENTS_FOUND = "rag.documents_found"
RAG_DOCUMENT_IDS = "rag.document_ids"
RAG_TOP_SIMILARITY = "rag.top_similarity"

# Response
RAG_CONFIDENCE = "rag.confidence"
RAG_URGENCY_TIER = "rag.urgency_tier"  # "low", "medium", "high", "emergency"
RAG_EMBEDDING_FALLBACK = "rag.embedding_fallback"  # bool
RAG_GENERATION_FALLBACK = "rag.generation_fallback"  # bool
RAG_LATENCY_MS = "rag.latency_ms"


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def query_attributes(
    query_id: str,
    patient_id: str,
    session_id: str | None = None,
    query_text: str | None = None,
) -> dict:
    """Create attributes dict for a query span."""
    attrs = {
        RAG_QUERY_ID: query_id,
        RAG_PATIENT_ID: patient_id,
    }
    if session_id:
        attrs[RAG_SESSION_ID] = session_id
    if query_text is not None:
        attrs[RAG_QUERY_TEXT] = query_text
    return attrs


def retrieval_attributes(
    top_k: int,
    min_score: float,
    document_ids: list[str],
    top_similarity: float,
) -> dict:
    """Create attributes dict for the search step."""
    return {
        RAG_TOP_K: top_k,
        RAG_MIN_SCORE: min_score,
        RAG_DOCUMENTS_FOUND: len(document_ids),
        RAG_DOCUMENT_IDS: document_ids,
        RAG_TOP_SIMILARITY: top_similarity,
    }


def generation_attributes(
    model: str,
    temperature: float,
    top_p: float,
    max_tokens: int,
) -> dict:
    """Create attributes dict for a generation call."""
    return {
        GEN_AI_SYSTEM: "openai",
        GEN_AI_REQUEST_MODEL: model,
        GEN_AI_REQUEST_TEMPERATURE: temperature,
        GEN_AI_REQUEST_TOP_P: top_p,
        GEN_AI_REQUEST_MAX_TOKENS: max_tokens,
    }
