"""
Query orchestrator - one request/response cycle.

Composes triage, the retrieval graph, response assembly and audit.

FLOW:
-----
1. Validate text (InvalidQuery before any embedding call; minimal audit entry)
2. Classify urgency - always, independent of retrieval; emergency raises a signal
3. Stream the graph: embed_query -> search_store -> synthesize_answer
4. Assemble MedicalResponse (confidence, ordered warnings, sources)
5. Write the AuditRecord (an audit failure never fails the request)

Any exception in steps 3-4 moves the request to FAILED and yields a
degraded response. InvalidQuery is the only error that reaches the caller.

INTERVIEW TALKING POINT:
------------------------
"The orchestrator is where failure policy lives. Nodes degrade locally
(fallback vector, fallback answer) and flag it in state; the orchestrator
turns those flags into warnings, a halved confidence and audit fields, and
catches anything unexpected so the caller always gets a well-formed answer."
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from medical_rag_pipeline.core.config import PipelineConfig, get_config
from medical_rag_pipeline.core.errors import (
    DimensionMismatchError,
    InvalidQuery,
    PipelineFailure,
)
from medical_rag_pipeline.generation import OUTAGE_ANSWER, AnswerSynthesizer, ensure_disclaimer
from medical_rag_pipeline.observability import attributes as attrs
from medical_rag_pipeline.observability.config import get_tracing_config
from medical_rag_pipeline.observability.tracer import get_tracer
from medical_rag_pipeline.pipeline.graph import STAGE_AFTER, build_pipeline_graph
from medical_rag_pipeline.pipeline.state import (
    PipelineStage,
    PipelineState,
    create_initial_state,
    source_documents,
)
from medical_rag_pipeline.schemas.medical import (
    ANONYMOUS_PATIENT,
    AuditRecord,
    MedicalQuery,
    MedicalResponse,
    new_id,
)
from medical_rag_pipeline.triage import (
    EMERGENCY_WARNING,
    GENERATION_FALLBACK_WARNING,
    IN_PERSON_CARE_WARNING,
    LOW_CONFIDENCE_WARNING,
    SYSTEM_UNAVAILABLE_WARNING,
    UrgencyTier,
    build_warnings,
    classify_urgency,
)

if TYPE_CHECKING:
    from medical_rag_pipeline.core import AuditSink, EmbeddingProvider, VectorStore
    from medical_rag_pipeline.observability.tracer import TracerProtocol

logger = logging.getLogger(__name__)

# Confidence multiplier when the answer is the generation fallback
GENERATION_FALLBACK_PENALTY = 0.5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class EmergencySignal:
    """One-way notification that a query matched an emergency pattern."""

    query_id: str
    patient_id: str
    session_id: str | None
    warning: str = EMERGENCY_WARNING
    urgency: UrgencyTier = UrgencyTier.EMERGENCY
    timestamp: datetime = field(default_factory=_utcnow)


def compute_confidence(state: PipelineState) -> float:
    """Top source similarity clamped to [0, 1]; halved on generation fallback."""
    if not state["sources"]:
        return 0.0
    confidence = min(max(state["sources"][0].similarity, 0.0), 1.0)
    if state["generation_fallback"]:
        confidence *= GENERATION_FALLBACK_PENALTY
    return confidence


def validate_query_text(text: Any) -> str:
    """Return `text` when it is a non-blank string, else raise InvalidQuery."""
    if not isinstance(text, str):
        raise InvalidQuery(f"Query text must be a string, got {type(text).__name__}")
    if not text.strip():
        raise InvalidQuery("Query text is required")
    return text


class QueryOrchestrator:
    """
    Run queries against a shared vector store.

    Instances hold no per-request state: concurrent process() calls each
    get their own graph state and share only the store, which is safe for
    concurrent reads.
    """

    def __init__(
        self,
        store: VectorStore,
        embeddings: EmbeddingProvider,
        synthesizer: AnswerSynthesizer | None = None,
        audit_sink: AuditSink | None = None,
        config: PipelineConfig | None = None,
        on_emergency: Callable[[EmergencySignal], None] | None = None,
        tracer: TracerProtocol | None = None,
    ):
        """
        Args:
            store: Shared VectorStore
            embeddings: Provider for query embeddings (same D as the store)
            synthesizer: Answer synthesizer (built from config if not provided)
            audit_sink: Destination for AuditRecords (logging sink if not provided)
            config: Pipeline settings (global config if not provided)
            on_emergency: Called once per emergency-tier query
            tracer: Tracer for query spans (global tracer if not provided)
        """
        if embeddings.dimensions != store.dimensions:
            raise DimensionMismatchError(
                f"Embedding provider returns {embeddings.dimensions} dimensions, "
                f"store holds {store.dimensions}"
            )

        self.config = config or get_config()
        self.store = store
        self.embeddings = embeddings
        self.synthesizer = synthesizer or AnswerSynthesizer.from_config(self.config)
        if audit_sink is None:
            from medical_rag_pipeline.audit import get_audit_sink

            audit_sink = get_audit_sink()
        self.audit_sink = audit_sink
        self.on_emergency = on_emergency
        self._tracer = tracer

        self.graph = build_pipeline_graph(
            embeddings,
            store,
            self.synthesizer,
            top_k=self.config.top_k,
            min_score=self.config.min_score,
        )

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def process(
        self,
        text: Any,
        patient_id: str | None = None,
        session_id: str | None = None,
    ) -> MedicalResponse:
        """
        Answer one query.

        Args:
            text: Query text (validated here)
            patient_id: Defaults to the anonymous marker
            session_id: Optional session correlation id

        Returns:
            MedicalResponse - degraded but well-formed on any internal failure

        Raises:
            InvalidQuery: text missing, not a string, or blank
        """
        patient_id = patient_id or ANONYMOUS_PATIENT

        try:
            text = validate_query_text(text)
        except InvalidQuery as e:
            self._emit_audit(AuditRecord(
                query_id=new_id("query"),
                patient_id=patient_id,
                session_id=session_id,
                query_text=text if isinstance(text, str) else "",
                status="invalid",
                error=e.message,
            ))
            raise

        query = MedicalQuery(text=text, patient_id=patient_id, session_id=session_id)
        urgency = classify_urgency(query.text)
        if urgency is UrgencyTier.EMERGENCY:
            self._signal_emergency(query)

        tracer = self._tracer or get_tracer()
        span_attrs = attrs.query_attributes(
            query.id, query.patient_id, query.session_id,
            query_text=get_tracing_config().span_text(query.text),
        )
        span_attrs[attrs.RAG_URGENCY_TIER] = urgency.value
        span_attrs.update(attrs.generation_attributes(
            self.config.generation_model,
            self.synthesizer.temperature,
            self.synthesizer.top_p,
            self.synthesizer.max_tokens,
        ))

        start = time.time()
        with tracer.start_span("medical_rag.query", attributes=span_attrs) as span:
            stage = PipelineStage.RECEIVED
            state = create_initial_state(query)
            try:
                stage = PipelineStage.EMBEDDING
                for update in self.graph.stream(state, stream_mode="updates"):
                    for node_name, node_update in update.items():
                        state.update(node_update or {})
                        stage = STAGE_AFTER.get(node_name, stage)
                        logger.debug(f"Query {query.id}: {node_name} done, stage={stage.value}")

                if stage is not PipelineStage.COMPLETED or not state["answer"]:
                    raise PipelineFailure(f"Pipeline stopped at stage {stage.value}")

                response = self._assemble_response(query, urgency, state)
                audit = self._audit_record(query, urgency, state, response)

            except Exception as e:
                failed_at = stage
                stage = PipelineStage.FAILED
                failure = e if isinstance(e, PipelineFailure) else PipelineFailure(str(e), cause=e)
                logger.error(
                    f"Query {query.id} failed during {failed_at.value}: {failure.message}",
                    exc_info=True,
                )
                span.record_exception(e)
                span.set_status("error", failure.message)

                response = self.degraded_response(query, urgency)
                audit = self._audit_record(
                    query, urgency, state, response,
                    status="failed",
                    error=f"{failed_at.value}: {failure.message}",
                )
            else:
                span.set_status("ok")
                results = state["results"]
                span.set_attributes(attrs.retrieval_attributes(
                    self.config.top_k,
                    self.config.min_score,
                    [r.document.id for r in results],
                    results[0].similarity if results else 0.0,
                ))

            latency_ms = (time.time() - start) * 1000
            span.set_attributes({
                attrs.RAG_STATUS: stage.value,
                attrs.RAG_CONFIDENCE: response.confidence,
                attrs.RAG_LATENCY_MS: latency_ms,
                attrs.RAG_EMBEDDING_FALLBACK: state["embedding_fallback"],
                attrs.RAG_GENERATION_FALLBACK: state["generation_fallback"],
            })

        logger.info(
            f"Query {query.id} {stage.value} in {latency_ms:.0f}ms: "
            f"{len(response.sources)} sources, confidence {response.confidence:.2f}, "
            f"urgency {urgency.value}"
        )
        self._emit_audit(audit)
        return response

    async def aprocess(
        self,
        text: Any,
        patient_id: str | None = None,
        session_id: str | None = None,
    ) -> MedicalResponse:
        """process() in a worker thread, so concurrent requests overlap."""
        return await asyncio.to_thread(self.process, text, patient_id, session_id)

    def degraded_response(self, query: MedicalQuery, urgency: UrgencyTier) -> MedicalResponse:
        """Safe outage response: confidence 0, no sources, in-person-care warning."""
        return MedicalResponse(
            query_id=query.id,
            answer=ensure_disclaimer(OUTAGE_ANSWER),
            sources=[],
            confidence=0.0,
            warnings=build_warnings(
                query.text,
                urgency,
                extra=[SYSTEM_UNAVAILABLE_WARNING, IN_PERSON_CARE_WARNING],
            ),
        )

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    def _assemble_response(
        self,
        query: MedicalQuery,
        urgency: UrgencyTier,
        state: PipelineState,
    ) -> MedicalResponse:
        extra = []
        if state["below_threshold"]:
            extra.append(LOW_CONFIDENCE_WARNING)
        if state["generation_fallback"]:
            extra.append(GENERATION_FALLBACK_WARNING)

        return MedicalResponse(
            query_id=query.id,
            answer=state["answer"],
            sources=source_documents(state),
            confidence=compute_confidence(state),
            warnings=build_warnings(query.text, urgency, extra=extra),
        )

    def _audit_record(
        self,
        query: MedicalQuery,
        urgency: UrgencyTier,
        state: PipelineState,
        response: MedicalResponse,
        status: str = "completed",
        error: str | None = None,
    ) -> AuditRecord:
        results = state["results"]
        return AuditRecord(
            query_id=query.id,
            patient_id=query.patient_id,
            session_id=query.session_id,
            query_text=query.text,
            timestamp=query.timestamp,
            status=status,
            documents_found=len(results),
            top_similarity=results[0].similarity if results else 0.0,
            confidence=response.confidence,
            urgency=urgency.value,
            embedding_fallback=state["embedding_fallback"],
            generation_fallback=state["generation_fallback"],
            error=error,
        )

    def _emit_audit(self, record: AuditRecord) -> None:
        try:
            self.audit_sink.record(record)
        except Exception as e:
            logger.error(f"Failed to write audit record for {record.query_id}: {e}")

    def _signal_emergency(self, query: MedicalQuery) -> None:
        logger.warning(f"Query {query.id}: emergency pattern detected")
        if self.on_emergency is None:
            return
        try:
            self.on_emergency(
                EmergencySignal(
                    query_id=query.id,
                    patient_id=query.patient_id,
                    session_id=query.session_id,
                )
            )
        except Exception as e:
            logger.error(f"Emergency callback failed for {query.id}: {e}")
