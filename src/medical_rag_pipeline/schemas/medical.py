"""
Domain schemas for the medical retrieval pipeline.

These Pydantic models are the contract between the pipeline stages and
whatever sits around them (transport layer, audit sink, UI).

WHY PYDANTIC HERE:
------------------
1. IMMUTABILITY: documents and audit records are frozen. A document is
   replaced wholesale by re-indexing, never edited in place.
2. BOUNDS: confidence is validated into [0, 1] and similarities into
   [-1, 1] at construction, so an out-of-range figure fails loudly.
3. SERIALIZATION: the audit sink and the response envelope both need
   JSON, which model_dump_json() gives us for free.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ANONYMOUS_PATIENT = "anonymous"

RESPONSE_DISCLAIMER = (
    "AI-generated response based on medical reference documents. "
    "Always consult a health professional."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate a unique identifier such as 'query-3f2a...'."""
    return f"{prefix}-{uuid.uuid4().hex}"


class Reliability(str, Enum):
    """How much a source can be trusted."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DocumentMetadata(BaseModel):
    """Provenance of a reference passage."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(description="Publication or guideline the passage comes from")
    speciality: str | None = Field(default=None, description="Medical speciality, e.g. 'Cardiology'")
    condition: str | None = Field(default=None, description="Condition the passage describes")
    last_updated: datetime = Field(default_factory=_utcnow)
    reliability: Reliability = Reliability.MEDIUM


class MedicalDocument(BaseModel):
    """
    A reference passage in the knowledge base.

    Immutable once indexed. The vector store keys documents by `id`;
    indexing a document with an existing id replaces the previous entry.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    content: str
    metadata: DocumentMetadata

    @property
    def title(self) -> str:
        """Human-readable title: the condition, falling back to the source."""
        return self.metadata.condition or self.metadata.source


class MedicalQuery(BaseModel):
    """A validated incoming question. Read-only downstream."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("query"))
    text: str = Field(min_length=1)
    patient_id: str = ANONYMOUS_PATIENT
    session_id: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query text must not be blank")
        return value


class MedicalResponse(BaseModel):
    """
    The answer produced for one query.

    `answer` always ends with the mandatory disclaimer. `warnings` is
    ordered and distinct, with the emergency warning first when present.
    """

    id: str = Field(default_factory=lambda: new_id("response"))
    query_id: str
    answer: str = Field(min_length=1)
    sources: list[MedicalDocument] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    warnings: list[str] = Field(default_factory=list)
    disclaimer: str = RESPONSE_DISCLAIMER

    @field_validator("warnings")
    @classmethod
    def warnings_distinct(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class AuditRecord(BaseModel):
    """
    Write-once snapshot of one processed query.

    The fallback flags make it possible to tell, after the fact, which
    confidence figures were computed against a pseudo-random vector.
    """

    model_config = ConfigDict(frozen=True)

    query_id: str
    patient_id: str = ANONYMOUS_PATIENT
    session_id: str | None = None
    query_text: str
    timestamp: datetime = Field(default_factory=_utcnow)
    status: Literal["completed", "failed", "invalid"] = "completed"
    documents_found: int = Field(default=0, ge=0)
    top_similarity: float = 0.0
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    urgency: str | None = None
    embedding_fallback: bool = False
    generation_fallback: bool = False
    pipeline_version: str = "in-memory-v1"
    error: str | None = None
