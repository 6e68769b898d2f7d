"""
Schemas module - Pydantic contracts for documents, queries, responses and audit.
"""

from medical_rag_pipeline.schemas.medical import (
    ANONYMOUS_PATIENT,
    RESPONSE_DISCLAIMER,
    AuditRecord,
    DocumentMetadata,
    MedicalDocument,
    MedicalQuery,
    MedicalResponse,
    Reliability,
    new_id,
)
from medical_rag_pipeline.schemas.api import (
    QueryReply,
    QueryRequest,
    ResponseMetadata,
    ResponsePayload,
    SourcePayload,
)

__all__ = [
    # Domain
    "ANONYMOUS_PATIENT",
    "RESPONSE_DISCLAIMER",
    "AuditRecord",
    "DocumentMetadata",
    "MedicalDocument",
    "MedicalQuery",
    "MedicalResponse",
    "Reliability",
    "new_id",
    # Wire
    "QueryReply",
    "QueryRequest",
    "ResponseMetadata",
    "ResponsePayload",
    "SourcePayload",
]
