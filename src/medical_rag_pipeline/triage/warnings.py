"""
Warning assembly for responses.

Warnings are ordered and distinct. The emergency warning, when present,
is always first so a UI that shows only one line shows the right one.
"""

from __future__ import annotations

import re
from typing import Iterable

from medical_rag_pipeline.triage.urgency import UrgencyTier

EMERGENCY_WARNING = (
    "MEDICAL EMERGENCY DETECTED: seek immediate care or call your local "
    "emergency number (192 in Brazil)."
)
HIGH_URGENCY_WARNING = "Your symptoms may need prompt medical attention. Contact a doctor soon."
MEDICATION_WARNING = "Never start or stop medication without medical guidance."
PERSISTENT_SYMPTOMS_WARNING = "Persistent symptoms should be evaluated by a doctor."
LOW_CONFIDENCE_WARNING = (
    "No reference passage closely matched this question; the answer may be incomplete."
)
GENERATION_FALLBACK_WARNING = (
    "The answer service is temporarily unavailable. Seek in-person medical care if needed."
)
SYSTEM_UNAVAILABLE_WARNING = "System temporarily unavailable."
IN_PERSON_CARE_WARNING = "In-person medical care is recommended."

_MEDICATION_RE = re.compile(
    r"medicamento|rem[ée]dio|medication|medicine|\bdrugs?\b|\bpills?\b|dosage|\bdose\b"
)
_PERSISTENT_RE = re.compile(
    r"h[áa]\s+(\d+\s+)?(dias|semanas)|for\s+(\d+|several|many|a\s+few)\s+(days|weeks)|"
    r"for\s+a\s+week|for\s+weeks"
)


def build_warnings(
    text: str,
    urgency: UrgencyTier,
    extra: Iterable[str] = (),
) -> list[str]:
    """
    Build the ordered warning list for a query.

    Args:
        text: Raw query text
        urgency: Tier from classify_urgency()
        extra: Pipeline warnings (low confidence, fallbacks) appended last

    Returns:
        Distinct warnings, emergency first when present
    """
    lowered = text.lower()
    warnings: list[str] = []

    if urgency is UrgencyTier.EMERGENCY:
        warnings.append(EMERGENCY_WARNING)
    elif urgency is UrgencyTier.HIGH:
        warnings.append(HIGH_URGENCY_WARNING)

    if _MEDICATION_RE.search(lowered):
        warnings.append(MEDICATION_WARNING)
    if _PERSISTENT_RE.search(lowered):
        warnings.append(PERSISTENT_SYMPTOMS_WARNING)

    warnings.extend(extra)
    return list(dict.fromkeys(warnings))
