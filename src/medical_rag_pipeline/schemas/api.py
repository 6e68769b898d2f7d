"""
Request/response envelope exchanged with the transport layer.

The HTTP framework itself is out of scope; these models are what a route
handler would serialize. Field aliases give the camelCase wire names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from medical_rag_pipeline.schemas.medical import MedicalDocument, MedicalResponse


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class QueryRequest(_Wire):
    """Incoming question. `text` is validated by the orchestrator, not here."""

    text: Any = None
    patient_id: str | None = Field(default=None, alias="patientId")
    session_id: str | None = Field(default=None, alias="sessionId")


class SourcePayload(_Wire):
    """A document as shown to the end user."""

    id: str
    title: str
    source: str
    speciality: str | None = None
    reliability: str
    excerpt: str

    @classmethod
    def from_document(cls, doc: MedicalDocument, excerpt_chars: int = 200) -> "SourcePayload":
        excerpt = doc.content[:excerpt_chars]
        if len(doc.content) > excerpt_chars:
            excerpt += "..."
        return cls(
            id=doc.id,
            title=doc.title,
            source=doc.metadata.source,
            speciality=doc.metadata.speciality,
            reliability=doc.metadata.reliability.value,
            excerpt=excerpt,
        )


class ResponsePayload(_Wire):
    """MedicalResponse-shaped body. Present on every reply, success or not."""

    answer: str
    confidence: float
    warnings: list[str] = Field(default_factory=list)
    sources: list[SourcePayload] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: MedicalResponse, excerpt_chars: int = 200) -> "ResponsePayload":
        return cls(
            answer=response.answer,
            confidence=response.confidence,
            warnings=list(response.warnings),
            sources=[SourcePayload.from_document(d, excerpt_chars) for d in response.sources],
        )


class ResponseMetadata(_Wire):
    query_id: str | None = Field(default=None, alias="queryId")
    response_id: str | None = Field(default=None, alias="responseId")
    processing_time_ms: float = Field(alias="processingTimeMs")
    documents_used: int = Field(default=0, alias="documentsUsed")
    timestamp: datetime
    rag_type: str = Field(default="in-memory", alias="ragType")
    version: str = "1.0.0"


class QueryReply(_Wire):
    """
    Envelope returned to the transport layer.

    `status_code` is the HTTP-equivalent status and is not part of the
    serialized body.
    """

    success: bool
    response: ResponsePayload
    metadata: ResponseMetadata
    error: str | None = None
    code: str | None = None
    status_code: int = Field(default=200, exclude=True)

    def to_wire(self) -> dict:
        """Serialize with camelCase names, dropping empty error fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
