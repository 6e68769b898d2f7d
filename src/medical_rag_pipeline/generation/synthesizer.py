"""
Answer synthesis - grounded answers from retrieved documents.

FAILURE CONTRACT:
-----------------
synthesize() raises GenerationUnavailable when the backend fails.
try_synthesize() wraps it into SynthesisResult | SynthesisError so the
pipeline branches on the outcome and substitutes fallback_answer(),
which tells the user to seek in-person care. An empty answer is never
returned on any path.

INTERVIEW TALKING POINT:
------------------------
"Prompt construction is pure and lives in prompts.py. The synthesizer only
decides WHICH documents go in, calls the backend once, and guarantees the
disclaimer. Swapping the backend for MockGeneration makes the whole path
deterministic in tests."
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Sequence

from medical_rag_pipeline.core.errors import GenerationUnavailable
from medical_rag_pipeline.generation.prompts import (
    FALLBACK_ANSWER,
    NO_INFORMATION_ANSWER,
    SYSTEM_PROMPT,
    build_context,
    build_prompt,
    ensure_disclaimer,
)
from medical_rag_pipeline.schemas.medical import MedicalDocument

if TYPE_CHECKING:
    from medical_rag_pipeline.core import GenerationBackend, PipelineConfig

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """A grounded answer (disclaimer included)."""

    answer: str
    documents_used: int


@dataclass
class SynthesisError:
    """Why no answer could be generated."""

    kind: Literal["unavailable"]
    error_message: str


class AnswerSynthesizer:
    """Compose grounded answers through an injected generation backend."""

    def __init__(
        self,
        backend: GenerationBackend,
        temperature: float = 0.3,
        top_p: float = 0.8,
        max_tokens: int = 1000,
        max_documents: int = 5,
    ):
        self.backend = backend
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens
        self.max_documents = max_documents

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        backend: GenerationBackend | None = None,
    ) -> "AnswerSynthesizer":
        """Build a synthesizer with sampling settings from config."""
        if backend is None:
            from medical_rag_pipeline.generation.backends import get_generation_backend

            backend = get_generation_backend(
                use_mock=config.use_mock_generation,
                model=config.generation_model,
            )
        return cls(
            backend=backend,
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_tokens,
            max_documents=config.max_context_documents,
        )

    def synthesize(
        self,
        query_text: str,
        documents: Sequence[MedicalDocument],
        max_documents: int | None = None,
    ) -> str:
        """
        Generate an answer grounded in `documents`.

        With no documents the backend is not called; the answer says no
        information was found.

        Raises:
            GenerationUnavailable: backend failure or empty completion
        """
        if not documents:
            logger.info("No documents to ground an answer; skipping generation")
            return ensure_disclaimer(NO_INFORMATION_ANSWER)

        limit = self.max_documents if max_documents is None else max_documents
        context = build_context(documents, limit)
        prompt = build_prompt(query_text, context)

        answer = self.backend.generate(
            prompt,
            SYSTEM_PROMPT,
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
        )
        if not answer or not answer.strip():
            raise GenerationUnavailable("Generation backend returned an empty answer")

        logger.debug(f"Generated answer from {min(len(documents), limit)} documents")
        return ensure_disclaimer(answer)

    def try_synthesize(
        self,
        query_text: str,
        documents: Sequence[MedicalDocument],
        max_documents: int | None = None,
    ) -> SynthesisResult | SynthesisError:
        """synthesize() with backend failure returned instead of raised."""
        limit = self.max_documents if max_documents is None else max_documents
        try:
            answer = self.synthesize(query_text, documents, max_documents=limit)
        except GenerationUnavailable as e:
            return SynthesisError(kind="unavailable", error_message=e.message)
        return SynthesisResult(answer=answer, documents_used=min(len(documents), limit))

    @staticmethod
    def fallback_answer() -> str:
        """Safe answer used when generation is unavailable."""
        return ensure_disclaimer(FALLBACK_ANSWER)
