"""
Medical knowledge base seed data.

This module contains the initial documents for the RAG system.
In production, this would come from a proper content pipeline.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from medical_rag_pipeline.schemas.medical import DocumentMetadata, MedicalDocument, Reliability

if TYPE_CHECKING:
    from medical_rag_pipeline.core import VectorStore

_REVIEWED = datetime(2024, 1, 15, tzinfo=timezone.utc)


def get_medical_documents() -> list[MedicalDocument]:
    """
    Get seed documents for the medical knowledge base.

    One passage per condition, taken from published clinical guidelines.
    In production, this would load from a database or content
    management system.
    """
    return [
        MedicalDocument(
            id="cardio-001",
            content=(
                "Systemic arterial hypertension is defined as systolic blood pressure of "
                "140 mmHg or higher and/or diastolic blood pressure of 90 mmHg or higher, "
                "confirmed on at least two occasions. Treatment includes lifestyle changes "
                "(DASH diet, exercise, salt reduction) and drug therapy when indicated. "
                "First-line antihypertensives include thiazide diuretics, ACE inhibitors, "
                "angiotensin II receptor blockers and calcium channel blockers."
            ),
            metadata=DocumentMetadata(
                source="Brazilian Guidelines on Arterial Hypertension - 2020",
                speciality="Cardiology",
                condition="Hypertension",
                last_updated=_REVIEWED,
                reliability=Reliability.HIGH,
            ),
        ),
        MedicalDocument(
            id="endo-001",
            content=(
                "Type 2 diabetes mellitus is characterized by hyperglycemia resulting from "
                "defects in insulin secretion and/or action. Diagnostic criteria: fasting "
                "glucose of 126 mg/dL or higher, HbA1c of 6.5% or higher, or glucose of "
                "200 mg/dL or higher after an oral glucose load. Treatment involves lifestyle "
                "changes and medication, with metformin as first line. Individualized "
                "glycemic targets are essential."
            ),
            metadata=DocumentMetadata(
                source="Brazilian Diabetes Society Guidelines 2023-2024",
                speciality="Endocrinology",
                condition="Diabetes",
                last_updated=_REVIEWED,
                reliability=Reliability.HIGH,
            ),
        ),
        MedicalDocument(
            id="neuro-001",
            content=(
                "Tension-type headache is the most common primary headache, characterized by "
                "bilateral pressing or tightening pain of mild to moderate intensity that is "
                "not aggravated by physical activity. It may be associated with photophobia "
                "or phonophobia (not both). Acute treatment includes simple analgesics "
                "(paracetamol, NSAIDs). Prophylaxis with amitriptyline is considered when "
                "headache occurs on 15 or more days per month."
            ),
            metadata=DocumentMetadata(
                source="International Classification of Headache Disorders - 3rd edition",
                speciality="Neurology",
                condition="Headache",
                last_updated=_REVIEWED,
                reliability=Reliability.HIGH,
            ),
        ),
        MedicalDocument(
            id="infect-001",
            content=(
                "Influenza is an acute viral respiratory infection with sudden onset of fever, "
                "cough, sore throat, headache, muscle aches and fatigue. Most people recover "
                "within one to two weeks with rest, fluids and antipyretics. Antiviral "
                "treatment with oseltamivir is recommended for high-risk patients when started "
                "within 48 hours of symptom onset. Shortness of breath or persistent high fever "
                "requires medical evaluation. Annual vaccination is the main prevention."
            ),
            metadata=DocumentMetadata(
                source="Ministry of Health Influenza Treatment Protocol - 2023",
                speciality="Infectious Disease",
                condition="Influenza",
                last_updated=_REVIEWED,
                reliability=Reliability.HIGH,
            ),
        ),
        MedicalDocument(
            id="psych-001",
            content=(
                "Generalized anxiety disorder is characterized by excessive, hard to control "
                "worry on most days for at least six months, with restlessness, fatigue, poor "
                "concentration, irritability, muscle tension or sleep disturbance. First-line "
                "treatment is cognitive behavioral therapy and/or selective serotonin reuptake "
                "inhibitors. Benzodiazepines should be limited to short-term use because of "
                "the risk of dependence."
            ),
            metadata=DocumentMetadata(
                source="Clinical Guideline for Anxiety Disorders - 2022",
                speciality="Psychiatry",
                condition="Anxiety",
                last_updated=_REVIEWED,
                reliability=Reliability.MEDIUM,
            ),
        ),
    ]


def seed_vector_store(store: VectorStore) -> int:
    """
    Seed a vector store with medical documents.

    This function is agnostic to the store implementation - it works
    with any VectorStore implementation.

    Args:
        store: Any VectorStore implementation

    Returns:
        Number of documents indexed
    """
    return store.index(get_medical_documents())
