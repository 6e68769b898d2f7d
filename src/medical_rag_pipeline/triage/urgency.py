"""
Urgency classification - rule-based triage over raw query text.

Pure and side-effect-free: no network, no state, safe to call from any
thread. Runs independently of retrieval so an emergency is flagged even
when every backend is down.

PRECEDENCE:
-----------
Tiers are checked strictly in order, emergency -> high -> medium, and the
first tier with any matching pattern wins. A query mentioning both a fever
(medium) and chest pain (emergency) is an emergency. No match is `low`.

Patterns cover Portuguese (the language of the original deployment) and
English, applied to lower-cased text.
"""

from __future__ import annotations

import re
from enum import Enum


class UrgencyTier(str, Enum):
    """Coarse severity of a query, lowest to highest."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


def _compile(patterns: list[str]) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p) for p in patterns)


EMERGENCY_PATTERNS = _compile([
    # Portuguese
    r"dor\s+no\s+peito",
    r"falta\s+de\s+ar\s+(severa?|grave)",
    r"dificuldade\s+para\s+respirar",
    r"desmaio|desmaiei",
    r"convuls[ãa]o",
    r"sangramento\s+intenso",
    r"perda\s+de\s+consci[êe]ncia",
    r"paralisia\s+s[úu]bita",
    r"dor\s+intensa\s+e\s+s[úu]bita",
    r"vis[ãa]o\s+turva\s+s[úu]bita",
    # English
    r"chest\s+pain",
    r"severe\s+shortness\s+of\s+breath",
    r"(difficulty|trouble)\s+breathing",
    r"can'?t\s+breathe",
    r"faint(ed|ing)|passed\s+out",
    r"seizure|convulsion",
    r"(heavy|severe)\s+bleeding",
    r"loss\s+of\s+consciousness|unconscious",
    r"sudden\s+paralysis",
    r"(intense|severe)\s+and\s+sudden\s+pain",
    r"sudden\s+blurred\s+vision",
])

HIGH_PATTERNS = _compile([
    # Portuguese
    r"dor\s+intensa",
    r"febre\s+alta|febre\s+acima",
    r"v[ôo]mito\s+persistente",
    r"sangramento",
    r"dor\s+s[úu]bita",
    r"incha[çc]o\s+s[úu]bito",
    r"tontura\s+intensa",
    r"palpita[çc][õo]es\s+fortes",
    # English
    r"(intense|severe)\s+pain",
    r"high\s+fever|fever\s+(above|over)",
    r"persistent\s+vomiting",
    r"bleeding",
    r"sudden\s+pain",
    r"sudden\s+swelling",
    r"severe\s+dizziness",
    r"strong\s+palpitations",
])

MEDIUM_PATTERNS = _compile([
    # Portuguese
    r"dor\s+h[áa]\s+\d+\s+dias",
    r"febre",
    r"tosse\s+persistente",
    r"dor\s+de\s+cabe[çc]a\s+forte",
    r"n[áa]usea",
    r"tontura|tonto",
    r"dor\s+abdominal",
    r"queima[çc][ãa]o",
    # English
    r"pain\s+for\s+\d+\s+days",
    r"fever",
    r"persistent\s+cough",
    r"(bad|strong|severe)\s+headache",
    r"nausea|nauseous",
    r"dizzy|dizziness",
    r"abdominal\s+pain|stomach\s*ache",
    r"heartburn",
])

# Checked in this order; first tier with a match wins.
_TIERS: tuple[tuple[UrgencyTier, tuple[re.Pattern, ...]], ...] = (
    (UrgencyTier.EMERGENCY, EMERGENCY_PATTERNS),
    (UrgencyTier.HIGH, HIGH_PATTERNS),
    (UrgencyTier.MEDIUM, MEDIUM_PATTERNS),
)


def classify_urgency(text: str) -> UrgencyTier:
    """
    Classify query text into an urgency tier.

    Args:
        text: Raw query text (any case)

    Returns:
        The highest tier with a matching pattern, or UrgencyTier.LOW
    """
    lowered = text.lower()
    for tier, patterns in _TIERS:
        if any(pattern.search(lowered) for pattern in patterns):
            return tier
    return UrgencyTier.LOW
