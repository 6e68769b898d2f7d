"""
Error taxonomy for the retrieval pipeline.

Only caller-input failures (InvalidQuery) cross the orchestrator boundary.
Backend failures are raised by adapters and absorbed by the pipeline,
which substitutes a named fallback value and keeps going.

| Error                      | Code               | Recovered by                    |
|----------------------------|--------------------|---------------------------------|
| InvalidQuery               | MISSING_TEXT       | surfaced to caller (400)        |
| EmbeddingUnavailable       | EMBEDDING_DOWN     | fallback vector                 |
| GenerationUnavailable      | GENERATION_DOWN    | safe fallback answer + warning  |
| PipelineFailure            | INTERNAL_ERROR     | degraded response               |
| ServiceInitializationError | RAG_INIT_ERROR     | degraded response (503)         |
"""

from __future__ import annotations


class MedicalRAGError(Exception):
    """Base class for every error raised by this package."""

    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict:
        """Structured form for logs and error envelopes."""
        result = {"type": type(self).__name__, "code": self.code, "message": self.message}
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result


class InvalidQuery(MedicalRAGError):
    """Query text is missing, not a string, or whitespace only."""

    code = "MISSING_TEXT"


class EmbeddingUnavailable(MedicalRAGError):
    """Embedding backend unreachable, misconfigured, or returned a malformed vector."""

    code = "EMBEDDING_DOWN"


class GenerationUnavailable(MedicalRAGError):
    """Generation backend unreachable, misconfigured, or returned no text."""

    code = "GENERATION_DOWN"


class PipelineFailure(MedicalRAGError):
    """Unexpected fault in the middle of a request."""

    code = "INTERNAL_ERROR"


class ConfigurationError(MedicalRAGError):
    """An environment value could not be parsed."""

    code = "CONFIG_ERROR"


class DimensionMismatchError(MedicalRAGError, ValueError):
    """Two vectors compared or stored together do not share dimension D."""

    code = "DIMENSION_MISMATCH"


class ServiceInitializationError(MedicalRAGError):
    """The knowledge base could not be loaded at start-up."""

    code = "RAG_INIT_ERROR"
