"""
Observability Module - Phoenix + OpenTelemetry Integration

Traces each query through the pipeline using Arize Phoenix with
OpenInference auto-instrumentation. Disabled by default.

USAGE:
------
# At application startup:
from medical_rag_pipeline.observability import init_tracing

init_tracing()  # Starts local Phoenix UI if PHOENIX_ENABLED=true

# In code that needs tracing:
from medical_rag_pipeline.observability import get_tracer

tracer = get_tracer()
with tracer.start_span("medical_rag.query", attributes={...}) as span:
    span.set_attribute(RAG_CONFIDENCE, 0.82)
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from medical_rag_pipeline.observability.attributes import (
    GEN_AI_REQUEST_MODEL,
    GEN_AI_SYSTEM,
    RAG_CONFIDENCE,
    RAG_DOCUMENT_IDS,
    RAG_DOCUMENTS_FOUND,
    RAG_EMBEDDING_FALLBACK,
    RAG_GENERATION_FALLBACK,
    RAG_LATENCY_MS,
    RAG_QUERY_ID,
    RAG_QUERY_TEXT,
    RAG_STATUS,
    RAG_TOP_SIMILARITY,
    RAG_URGENCY_TIER,
    generation_attributes,
    query_attributes,
    retrieval_attributes,
)
from medical_rag_pipeline.observability.config import (
    TracingConfig,
    get_tracing_config,
    reset_tracing_config,
)
from medical_rag_pipeline.observability.tracer import (
    NoOpTracer,
    OTelTracer,
    Span,
    TracerProtocol,
    get_tracer,
    reset_tracer,
)

logger = logging.getLogger(__name__)

_tracing_initialized = False


def init_tracing(config: TracingConfig | None = None) -> bool:
    """
    Initialize Phoenix tracing.

    Sets up the OpenTelemetry tracer provider, exporting to a remote OTLP
    endpoint or a locally launched Phoenix UI, and registers the
    auto-instrumentors.

    Args:
        config: Optional config (uses env vars if not provided)

    Returns:
        True if tracing was initialized, False if disabled or failed
    """
    global _tracing_initialized
    if _tracing_initialized:
        return True

    config = config or get_tracing_config()

    if not config.enabled:
        logger.debug("Phoenix tracing disabled")
        return False

    try:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        if config.launches_local_app:
            import phoenix as px

            session = px.launch_app()
            endpoint = f"{session.url.rstrip('/')}/v1/traces"
            logger.info(f"Phoenix UI available at: {session.url}")
        else:
            endpoint = config.collector_endpoint
            logger.info(f"Phoenix connecting to remote: {endpoint}")

        resource = Resource.create({"openinference.project.name": config.project_name})
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)

        from medical_rag_pipeline.observability.instrumentation import register_instrumentors
        register_instrumentors()

        reset_tracer()
        _tracing_initialized = True
        return True

    except ImportError as e:
        logger.warning(f"Tracing extra not installed, tracing disabled: {e}")
        return False
    except Exception as e:
        logger.error(f"Failed to initialize tracing: {e}")
        return False


def shutdown_tracing() -> None:
    """Flush spans and shut the provider down."""
    global _tracing_initialized

    if not _tracing_initialized:
        return

    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        try:
            provider.shutdown()
        except Exception as e:
            logger.warning(f"Error shutting down tracing: {e}")

    from medical_rag_pipeline.observability.instrumentation import uninstrument
    uninstrument()

    reset_tracer()
    reset_tracing_config()
    _tracing_initialized = False


__all__ = [
    # Initialization
    "init_tracing",
    "shutdown_tracing",
    # Config
    "TracingConfig",
    "get_tracing_config",
    "reset_tracing_config",
    # Tracer
    "TracerProtocol",
    "Span",
    "NoOpTracer",
    "OTelTracer",
    "get_tracer",
    "reset_tracer",
    # Attributes
    "GEN_AI_SYSTEM",
    "GEN_AI_REQUEST_MODEL",
    "RAG_QUERY_ID",
    "RAG_QUERY_TEXT",
    "RAG_STATUS",
    "RAG_DOCUMENTS_FOUND",
    "RAG_DOCUMENT_IDS",
    "RAG_TOP_SIMILARITY",
    "RAG_CONFIDENCE",
    "RAG_URGENCY_TIER",
    "RAG_EMBEDDING_FALLBACK",
    "RAG_GENERATION_FALLBACK",
    "RAG_LATENCY_MS",
    # Helpers
    "query_attributes",
    "retrieval_attributes",
    "generation_attributes",
]
