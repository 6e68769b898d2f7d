"""
Medical RAG service - process-wide entry point for the transport layer.

Owns the knowledge base and the orchestrator, initializes them exactly
once, and turns each request into a QueryReply envelope.

INITIALIZATION:
---------------
UNINITIALIZED -> INITIALIZING -> READY | FAILED

A lock guards the transition. Concurrent callers block on the same
in-flight initialization and then see its outcome. FAILED is not
terminal: the next request retries.

ENVELOPE CODES:
---------------
| Situation                    | code            | status |
|------------------------------|-----------------|--------|
| answered                     | -               | 200    |
| text missing / blank         | MISSING_TEXT    | 400    |
| request body not an object   | INVALID_REQUEST | 400    |
| knowledge base failed to load| RAG_INIT_ERROR  | 503    |
| anything else                | INTERNAL_ERROR  | 500    |

Every envelope carries a MedicalResponse-shaped body.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Sequence

from pydantic import ValidationError

from medical_rag_pipeline.core.config import PipelineConfig, get_config
from medical_rag_pipeline.core.errors import (
    InvalidQuery,
    MedicalRAGError,
    ServiceInitializationError,
)
from medical_rag_pipeline.embeddings import get_embedding_provider
from medical_rag_pipeline.generation import OUTAGE_ANSWER, AnswerSynthesizer, ensure_disclaimer
from medical_rag_pipeline.pipeline.orchestrator import EmergencySignal, QueryOrchestrator
from medical_rag_pipeline.retrieval import InMemoryVectorStore, get_medical_documents
from medical_rag_pipeline.schemas.api import (
    QueryReply,
    QueryRequest,
    ResponseMetadata,
    ResponsePayload,
)
from medical_rag_pipeline.schemas.medical import ANONYMOUS_PATIENT, MedicalDocument, new_id
from medical_rag_pipeline.triage import (
    IN_PERSON_CARE_WARNING,
    SYSTEM_UNAVAILABLE_WARNING,
    UrgencyTier,
    build_warnings,
    classify_urgency,
)

if TYPE_CHECKING:
    from medical_rag_pipeline.core import AuditSink, EmbeddingProvider, GenerationBackend

logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"
RAG_TYPE = "in-memory"

MISSING_TEXT_ANSWER = "Please type a health question so I can search the medical references."


class InitState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_session_id() -> str:
    return f"session-{int(time.time() * 1000)}"


class MedicalRAGService:
    """
    Lazily initialized RAG service.

    Dependencies are injectable for testing; anything not provided is
    built from PipelineConfig on first initialization.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        embeddings: EmbeddingProvider | None = None,
        generation_backend: GenerationBackend | None = None,
        audit_sink: AuditSink | None = None,
        document_loader: Callable[[], Sequence[MedicalDocument]] = get_medical_documents,
        on_emergency: Callable[[EmergencySignal], None] | None = None,
    ):
        self.config = config or get_config()
        self._embeddings = embeddings
        self._generation_backend = generation_backend
        self._audit_sink = audit_sink
        self._document_loader = document_loader
        self.on_emergency = on_emergency

        self._init_lock = threading.Lock()
        self._state = InitState.UNINITIALIZED
        self._init_error: Exception | None = None
        self._store: InMemoryVectorStore | None = None
        self._orchestrator: QueryOrchestrator | None = None

    # -------------------------------------------------------------------------
    # INITIALIZATION
    # -------------------------------------------------------------------------

    @property
    def state(self) -> InitState:
        return self._state

    @property
    def store(self) -> InMemoryVectorStore | None:
        return self._store

    @property
    def orchestrator(self) -> QueryOrchestrator | None:
        return self._orchestrator

    def initialize(self) -> None:
        """
        Build the knowledge base and orchestrator once.

        Raises:
            ServiceInitializationError: loading or indexing failed
        """
        if self._state is InitState.READY:
            return

        with self._init_lock:
            if self._state is InitState.READY:
                return

            self._state = InitState.INITIALIZING
            logger.info("Initializing medical RAG service")
            try:
                embeddings = self._embeddings or get_embedding_provider(
                    use_mock=self.config.use_mock_embeddings,
                    model=self.config.embedding_model,
                    dimensions=self.config.embedding_dim,
                )
                store = InMemoryVectorStore(embeddings)
                documents = self._document_loader()
                indexed = store.rebuild(documents)

                synthesizer = AnswerSynthesizer.from_config(self.config, backend=self._generation_backend)
                orchestrator = QueryOrchestrator(
                    store,
                    embeddings,
                    synthesizer=synthesizer,
                    audit_sink=self._audit_sink,
                    config=self.config,
                    on_emergency=self.on_emergency,
                )
            except Exception as e:
                self._state = InitState.FAILED
                self._init_error = e
                logger.error(f"Medical RAG service failed to initialize: {e}", exc_info=True)
                raise ServiceInitializationError(f"Knowledge base could not be loaded: {e}", cause=e) from e

            self._store = store
            self._orchestrator = orchestrator
            self._init_error = None
            self._state = InitState.READY
            logger.info(f"Medical RAG service ready ({indexed}/{len(documents)} documents indexed)")

    async def ainitialize(self) -> None:
        await asyncio.to_thread(self.initialize)

    # -------------------------------------------------------------------------
    # REQUEST HANDLING
    # -------------------------------------------------------------------------

    def handle_request(self, payload: QueryRequest | dict[str, Any]) -> QueryReply:
        """
        Answer one transport-level request.

        Never raises: every outcome is a QueryReply with a body.
        """
        start = time.time()

        try:
            request = payload if isinstance(payload, QueryRequest) else QueryRequest.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Rejected malformed request: {e.error_count()} validation errors")
            return self._error_reply(
                start, "Invalid request body", "INVALID_REQUEST", 400,
                ResponsePayload(answer=MISSING_TEXT_ANSWER, confidence=0.0),
            )

        patient_id = request.patient_id or ANONYMOUS_PATIENT
        session_id = request.session_id or default_session_id()

        try:
            self.initialize()
        except ServiceInitializationError as e:
            return self._error_reply(
                start, e.message, e.code, 503,
                self._unavailable_body(request.text, patient_id, session_id, signal_emergency=True),
            )

        try:
            response = self._orchestrator.process(request.text, patient_id=patient_id, session_id=session_id)
        except InvalidQuery as e:
            return self._error_reply(
                start, e.message, e.code, 400,
                ResponsePayload(answer=MISSING_TEXT_ANSWER, confidence=0.0),
            )
        except Exception as e:
            logger.error(f"Unhandled error answering request: {e}", exc_info=True)
            message = e.message if isinstance(e, MedicalRAGError) else "Internal error"
            return self._error_reply(
                start, message, "INTERNAL_ERROR", 500, self._unavailable_body(request.text, patient_id, session_id),
            )

        return QueryReply(
            success=True,
            response=ResponsePayload.from_response(response, self.config.excerpt_chars),
            metadata=ResponseMetadata(
                query_id=response.query_id,
                response_id=response.id,
                processing_time_ms=(time.time() - start) * 1000,
                documents_used=len(response.sources),
                timestamp=_utcnow(),
                rag_type=RAG_TYPE,
                version=SERVICE_VERSION,
            ),
            status_code=200,
        )

    async def ahandle_request(self, payload: QueryRequest | dict[str, Any]) -> QueryReply:
        """handle_request() in a worker thread."""
        return await asyncio.to_thread(self.handle_request, payload)

    def status(self) -> dict:
        """Health summary for a status endpoint."""
        return {
            "status": "Medical RAG API",
            "version": SERVICE_VERSION,
            "ragType": RAG_TYPE,
            "state": self._state.value,
            "healthy": self._state is InitState.READY,
            "store": self._store.stats() if self._store is not None else None,
            "error": str(self._init_error) if self._init_error is not None else None,
            "timestamp": _utcnow().isoformat(),
        }

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    def _unavailable_body(
        self,
        text: Any,
        patient_id: str,
        session_id: str | None,
        signal_emergency: bool = False,
    ) -> ResponsePayload:
        """
        Outage body; still carries the emergency warning when the text shows one.

        Only the 503 path sets signal_emergency: once the orchestrator has run,
        it has already raised the signal for this query.
        """
        extra = [SYSTEM_UNAVAILABLE_WARNING, IN_PERSON_CARE_WARNING]
        if isinstance(text, str) and text.strip():
            urgency = classify_urgency(text)
            if signal_emergency and urgency is UrgencyTier.EMERGENCY and self.on_emergency is not None:
                try:
                    self.on_emergency(EmergencySignal(query_id=new_id("query"), patient_id=patient_id, session_id=session_id))
                except Exception as e:
                    logger.error(f"Emergency callback failed: {e}")
            warnings = build_warnings(text, urgency, extra=extra)
        else:
            warnings = extra
        return ResponsePayload(
            answer=ensure_disclaimer(OUTAGE_ANSWER),
            confidence=0.0,
            warnings=warnings,
        )

    @staticmethod
    def _error_reply(
        start: float,
        error: str,
        code: str,
        status_code: int,
        body: ResponsePayload,
    ) -> QueryReply:
        return QueryReply(
            success=False,
            response=body,
            metadata=ResponseMetadata(
                processing_time_ms=(time.time() - start) * 1000,
                documents_used=0,
                timestamp=_utcnow(),
                rag_type=RAG_TYPE,
                version=SERVICE_VERSION,
            ),
            error=error,
            code=code,
            status_code=status_code,
        )


# ---------------------------------------------------------------------------
# PROCESS-WIDE INSTANCE
# ---------------------------------------------------------------------------

_service: MedicalRAGService | None = None
_service_lock = threading.Lock()


def get_medical_rag_service() -> MedicalRAGService:
    """Get the process-wide service (created on first call, initialized lazily)."""
    global _service
    with _service_lock:
        if _service is None:
            _service = MedicalRAGService()
        return _service


def reset_medical_rag_service() -> None:
    """Drop the process-wide service (useful for testing)."""
    global _service
    with _service_lock:
        _service = None
