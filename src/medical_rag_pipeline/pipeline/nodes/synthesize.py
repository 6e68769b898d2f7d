"""
Synthesize node - grounded answer from the reported sources.

Branches on the synthesizer's result union: on SynthesisError the node
substitutes the safe fallback answer and flags generation_fallback.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from medical_rag_pipeline.generation import SynthesisError
from medical_rag_pipeline.pipeline.state import source_documents

if TYPE_CHECKING:
    from medical_rag_pipeline.generation import AnswerSynthesizer
    from medical_rag_pipeline.pipeline.state import PipelineState

logger = logging.getLogger(__name__)


def create_synthesize_node(synthesizer: AnswerSynthesizer) -> Callable[[PipelineState], dict]:
    """
    Factory that creates a synthesize node with an injected synthesizer.

    Returns:
        A node function compatible with LangGraph
    """

    def synthesize_answer(state: PipelineState) -> dict:
        """
        Reads from state:
        - query, sources

        Writes to state:
        - answer, generation_fallback, synthesis_latency_ms
        """
        start = time.time()
        query = state["query"]

        outcome = synthesizer.try_synthesize(query.text, source_documents(state))
        if isinstance(outcome, SynthesisError):
            logger.warning(
                f"Query {query.id}: generation {outcome.kind} ({outcome.error_message}); "
                "using fallback answer"
            )
            answer = synthesizer.fallback_answer()
            used_fallback = True
        else:
            answer = outcome.answer
            used_fallback = False

        return {
            "answer": answer,
            "generation_fallback": used_fallback,
            "synthesis_latency_ms": (time.time() - start) * 1000,
        }

    return synthesize_answer
