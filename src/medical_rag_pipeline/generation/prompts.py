"""
Prompt construction for grounded answer synthesis.

Every function here is PURE - same inputs always produce the same output,
so prompts can be tested without any model call.
"""

from __future__ import annotations

from typing import Sequence

from medical_rag_pipeline.schemas.medical import MedicalDocument

CONTEXT_DELIMITER = "\n\n---\n\n"

ANSWER_DISCLAIMER = (
    "DISCLAIMER: This information is for educational purposes only and does not "
    "replace a consultation with a health professional."
)

SYSTEM_PROMPT = f"""You are a medical information assistant.

RULES:
- Answer ONLY with information contained in the CONTEXT documents.
- If the context is insufficient to answer, say so explicitly. Never invent facts.
- Do NOT diagnose conditions or prescribe medication.
- Recommend consulting a health professional when appropriate.
- Answer in the same language as the question, clearly and concisely.
- Always end your answer with exactly this sentence:
{ANSWER_DISCLAIMER}"""

NO_INFORMATION_ANSWER = (
    "I could not find information about this topic in the medical reference documents "
    "available to me. Please consult a health professional for guidance."
)

FALLBACK_ANSWER = (
    "The answer service is temporarily unavailable, so I cannot answer this question "
    "right now. If you have symptoms or concerns, please seek in-person medical care."
)

OUTAGE_ANSWER = (
    "Sorry, an internal error occurred while processing your question. Please consult "
    "a health professional or try again in a few minutes."
)


def format_document(position: int, doc: MedicalDocument) -> str:
    """Render one document as a numbered context block."""
    return (
        f"DOCUMENT {position}:\n"
        f"Source: {doc.metadata.source}\n"
        f"Speciality: {doc.metadata.speciality or 'General'}\n"
        f"Content: {doc.content}"
    )


def build_context(documents: Sequence[MedicalDocument], max_documents: int) -> str:
    """
    Concatenate documents in ranked order, capped at max_documents.

    Args:
        documents: Retrieved documents, most relevant first
        max_documents: Upper bound on documents included

    Returns:
        Context block with documents separated by CONTEXT_DELIMITER
    """
    selected = list(documents)[:max_documents]
    return CONTEXT_DELIMITER.join(
        format_document(i, doc) for i, doc in enumerate(selected, start=1)
    )


def build_prompt(query_text: str, context: str) -> str:
    """Build the user prompt pairing the question with its context."""
    return f"""CONTEXT:
{context}

QUESTION: {query_text}

Answer using only the context above."""


def ensure_disclaimer(answer: str) -> str:
    """Append the disclaimer unless the answer already ends with it."""
    stripped = answer.rstrip()
    if stripped.endswith(ANSWER_DISCLAIMER):
        return stripped
    return f"{stripped}\n\n{ANSWER_DISCLAIMER}"
