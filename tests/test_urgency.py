"""
Unit Tests for Urgency Classification and Warnings

classify_urgency() is pure: plain inputs, plain assertions.
"""

import pytest

from medical_rag_pipeline.triage import (
    EMERGENCY_WARNING,
    HIGH_URGENCY_WARNING,
    LOW_CONFIDENCE_WARNING,
    MEDICATION_WARNING,
    PERSISTENT_SYMPTOMS_WARNING,
    UrgencyTier,
    build_warnings,
    classify_urgency,
)


# ---------------------------------------------------------------------------
# TIERS
# ---------------------------------------------------------------------------


class TestClassifyUrgency:
    """Test each tier with Portuguese and English phrasing."""

    @pytest.mark.parametrize("text", [
        "sangramento intenso",
        "Estou com DOR NO PEITO",
        "tive uma convulsão ontem",
        "falta de ar severa",
        "desmaiei no trabalho",
        "I have chest pain",
        "my father is having trouble breathing",
        "she had a seizure",
        "he passed out",
    ])
    def test_emergency(self, text):
        assert classify_urgency(text) is UrgencyTier.EMERGENCY

    @pytest.mark.parametrize("text", [
        "dor intensa na perna",
        "febre alta desde ontem",
        "vômito persistente",
        "sangramento no nariz",
        "severe pain in my knee",
        "high fever since yesterday",
        "nose bleeding",
    ])
    def test_high(self, text):
        assert classify_urgency(text) is UrgencyTier.HIGH

    @pytest.mark.parametrize("text", [
        "dor há 3 dias",
        "estou com febre",
        "tosse persistente",
        "sinto náusea",
        "fico tonto",
        "persistent cough",
        "I feel dizzy",
        "abdominal pain after meals",
    ])
    def test_medium(self, text):
        assert classify_urgency(text) is UrgencyTier.MEDIUM

    @pytest.mark.parametrize("text", [
        "what is hypertension",
        "o que é diabetes",
        "how does metformin work",
    ])
    def test_low(self, text):
        assert classify_urgency(text) is UrgencyTier.LOW

    def test_emergency_wins_over_medium(self):
        assert classify_urgency("tenho febre e dor no peito") is UrgencyTier.EMERGENCY

    def test_emergency_wins_over_high(self):
        """'sangramento' alone is high; 'sangramento intenso' is emergency."""
        assert classify_urgency("sangramento") is UrgencyTier.HIGH
        assert classify_urgency("sangramento intenso") is UrgencyTier.EMERGENCY

    def test_high_wins_over_medium(self):
        assert classify_urgency("fever and severe pain") is UrgencyTier.HIGH

    def test_pure(self):
        text = "chest pain"
        assert classify_urgency(text) == classify_urgency(text)
        assert text == "chest pain"


# ---------------------------------------------------------------------------
# WARNINGS
# ---------------------------------------------------------------------------


class TestBuildWarnings:
    """Test ordered, distinct warning assembly."""

    def test_emergency_first(self):
        warnings = build_warnings(
            "dor no peito, posso tomar remédio?",
            UrgencyTier.EMERGENCY,
            extra=[LOW_CONFIDENCE_WARNING],
        )
        assert warnings[0] == EMERGENCY_WARNING
        assert warnings == [EMERGENCY_WARNING, MEDICATION_WARNING, LOW_CONFIDENCE_WARNING]

    def test_high_urgency_warning(self):
        assert build_warnings("high fever", UrgencyTier.HIGH) == [HIGH_URGENCY_WARNING]

    def test_low_has_no_warnings(self):
        assert build_warnings("what is hypertension", UrgencyTier.LOW) == []

    @pytest.mark.parametrize("text", ["dor de cabeça há dias", "headache for 3 days", "cough for weeks"])
    def test_persistent_symptoms(self, text):
        assert PERSISTENT_SYMPTOMS_WARNING in build_warnings(text, UrgencyTier.LOW)

    @pytest.mark.parametrize("text", ["qual medicamento tomar", "can I take this medication"])
    def test_medication(self, text):
        assert MEDICATION_WARNING in build_warnings(text, UrgencyTier.LOW)

    def test_distinct(self):
        warnings = build_warnings(
            "medication", UrgencyTier.LOW, extra=[MEDICATION_WARNING, LOW_CONFIDENCE_WARNING, LOW_CONFIDENCE_WARNING]
        )
        assert warnings == [MEDICATION_WARNING, LOW_CONFIDENCE_WARNING]
