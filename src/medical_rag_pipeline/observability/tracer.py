"""
Tracer factory.

The pipeline only ever does three things with a span: attach attributes,
mark it ok or failed, and record the exception that failed it. Span wraps
an OpenTelemetry span for exactly that, and is inert when nothing is
behind it, so callers never branch on whether tracing is on.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Mapping, Protocol

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Status, StatusCode

from medical_rag_pipeline.observability.config import get_tracing_config

TRACER_NAME = "medical_rag_pipeline"


class Span:
    """Handle on one span; every call is a no-op without an OTel span."""

    __slots__ = ("_span",)

    def __init__(self, otel_span: Any = None):
        self._span = otel_span

    @property
    def is_recording(self) -> bool:
        return self._span is not None and self._span.is_recording()

    def set_attribute(self, key: str, value: Any) -> None:
        # OTel rejects None attribute values
        if self._span is not None and value is not None:
            self._span.set_attribute(key, value)

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        for key, value in attributes.items():
            self.set_attribute(key, value)

    def set_status(self, status: str, description: str | None = None) -> None:
        """Mark the span "ok" or failed; the description is kept for failures only."""
        if self._span is None:
            return
        if status == "ok":
            self._span.set_status(Status(StatusCode.OK))
        else:
            self._span.set_status(Status(StatusCode.ERROR, description))

    def record_exception(self, exception: BaseException) -> None:
        if self._span is not None:
            self._span.record_exception(exception)


class TracerProtocol(Protocol):
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> ContextManager[Span]:
        ...


class NoOpTracer:
    """Tracer used while tracing is disabled: spans are inert."""

    @contextmanager
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
        yield Span()


class OTelTracer:
    """Tracer backed by the installed OpenTelemetry SDK provider."""

    def __init__(self, tracer: trace.Tracer):
        self._tracer = tracer

    @contextmanager
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
        clean = {k: v for k, v in (attributes or {}).items() if v is not None}
        with self._tracer.start_as_current_span(name, attributes=clean) as span:
            yield Span(span)


_tracer: TracerProtocol | None = None


def get_tracer() -> TracerProtocol:
    """
    Process-wide tracer.

    OTelTracer only after init_tracing() has installed an SDK provider for
    an enabled config; NoOpTracer otherwise. Cached until reset_tracer().
    """
    global _tracer
    if _tracer is None:
        installed = isinstance(trace.get_tracer_provider(), TracerProvider)
        if get_tracing_config().enabled and installed:
            _tracer = OTelTracer(trace.get_tracer(TRACER_NAME))
        else:
            _tracer = NoOpTracer()
    return _tracer


def reset_tracer() -> None:
    """Drop the cached tracer (init_tracing() and tests call this)."""
    global _tracer
    _tracer = None
