"""
Audit sinks - append-only destinations for AuditRecord.

Pattern: Protocol (core.protocols.AuditSink) -> Implementations

1. LoggingAuditSink - one JSON document per record on a dedicated logger
2. TracingAuditSink - one span per record through the observability tracer
3. InMemoryAuditSink - keeps records for tests and inspection
4. CompositeAuditSink - fan-out; a failing sink does not stop the others

Sinks MAY raise. The orchestrator catches sink errors so an audit failure
never fails a request.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from medical_rag_pipeline.observability import attributes as attrs
from medical_rag_pipeline.observability.config import get_tracing_config
from medical_rag_pipeline.observability.tracer import TracerProtocol, get_tracer
from medical_rag_pipeline.schemas.medical import AuditRecord

logger = logging.getLogger(__name__)

AUDIT_LOGGER_NAME = "medical_rag_pipeline.audit"


class LoggingAuditSink:
    """Write each record as JSON on the `medical_rag_pipeline.audit` logger."""

    def __init__(self, logger_name: str = AUDIT_LOGGER_NAME, level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def record(self, entry: AuditRecord) -> None:
        self._logger.log(self._level, entry.model_dump_json())


class InMemoryAuditSink:
    """Keep records in memory. Thread-safe."""

    def __init__(self):
        self._records: list[AuditRecord] = []
        self._lock = threading.Lock()

    def record(self, entry: AuditRecord) -> None:
        with self._lock:
            self._records.append(entry)

    @property
    def records(self) -> list[AuditRecord]:
        with self._lock:
            return list(self._records)

    def for_query(self, query_id: str) -> list[AuditRecord]:
        return [r for r in self.records if r.query_id == query_id]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class TracingAuditSink:
    """
    Emit each record as a `medical_rag.audit` span.

    Query text is only attached when PHOENIX_CAPTURE_QUERY_TEXT is enabled.
    """

    def __init__(self, tracer: TracerProtocol | None = None, capture_query_text: bool | None = None):
        self._tracer = tracer
        self._capture_query_text = capture_query_text

    def record(self, entry: AuditRecord) -> None:
        tracer = self._tracer or get_tracer()

        span_attrs = attrs.query_attributes(
            entry.query_id,
            entry.patient_id,
            session_id=entry.session_id,
            query_text=self._span_text(entry.query_text),
        )
        span_attrs.update({
            attrs.RAG_STATUS: entry.status,
            attrs.RAG_DOCUMENTS_FOUND: entry.documents_found,
            attrs.RAG_TOP_SIMILARITY: entry.top_similarity,
            attrs.RAG_CONFIDENCE: entry.confidence,
            attrs.RAG_EMBEDDING_FALLBACK: entry.embedding_fallback,
            attrs.RAG_GENERATION_FALLBACK: entry.generation_fallback,
        })
        if entry.urgency:
            span_attrs[attrs.RAG_URGENCY_TIER] = entry.urgency

        with tracer.start_span("medical_rag.audit", attributes=span_attrs) as span:
            span.set_status("ok" if entry.status == "completed" else "error", entry.error)

    def _span_text(self, text: str) -> str | None:
        if self._capture_query_text is None:
            return get_tracing_config().span_text(text)
        return text if self._capture_query_text else None


class CompositeAuditSink:
    """Forward each record to several sinks."""

    def __init__(self, sinks: Iterable):
        self.sinks = list(sinks)

    def record(self, entry: AuditRecord) -> None:
        for sink in self.sinks:
            try:
                sink.record(entry)
            except Exception as e:
                logger.error(f"Audit sink {type(sink).__name__} failed for {entry.query_id}: {e}")


def get_audit_sink(tracing: bool | None = None):
    """
    Factory for the default audit sink.

    Args:
        tracing: Also emit spans (defaults to PHOENIX_ENABLED)
    """
    if tracing is None:
        tracing = get_tracing_config().enabled
    if tracing:
        return CompositeAuditSink([LoggingAuditSink(), TracingAuditSink()])
    return LoggingAuditSink()
