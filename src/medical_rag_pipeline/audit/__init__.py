"""
Audit module - write-once records of every processed query.
"""

from medical_rag_pipeline.audit.sinks import (
    AUDIT_LOGGER_NAME,
    CompositeAuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    TracingAuditSink,
    get_audit_sink,
)

__all__ = [
    "AUDIT_LOGGER_NAME",
    "CompositeAuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "TracingAuditSink",
    "get_audit_sink",
]
