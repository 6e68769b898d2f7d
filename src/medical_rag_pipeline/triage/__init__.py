"""
Triage module - urgency classification and response warnings.

classify_urgency() is a pure function usable on its own; build_warnings()
turns its tier plus pipeline signals into the ordered warning list.
"""

from medical_rag_pipeline.triage.urgency import UrgencyTier, classify_urgency
from medical_rag_pipeline.triage.warnings import (
    EMERGENCY_WARNING,
    GENERATION_FALLBACK_WARNING,
    HIGH_URGENCY_WARNING,
    IN_PERSON_CARE_WARNING,
    LOW_CONFIDENCE_WARNING,
    MEDICATION_WARNING,
    PERSISTENT_SYMPTOMS_WARNING,
    SYSTEM_UNAVAILABLE_WARNING,
    build_warnings,
)

__all__ = [
    "UrgencyTier",
    "classify_urgency",
    "build_warnings",
    "EMERGENCY_WARNING",
    "GENERATION_FALLBACK_WARNING",
    "HIGH_URGENCY_WARNING",
    "IN_PERSON_CARE_WARNING",
    "LOW_CONFIDENCE_WARNING",
    "MEDICATION_WARNING",
    "PERSISTENT_SYMPTOMS_WARNING",
    "SYSTEM_UNAVAILABLE_WARNING",
]
