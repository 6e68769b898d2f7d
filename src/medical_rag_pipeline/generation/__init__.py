"""
Generation module - grounded answer synthesis.

1. Pure prompt builders (prompts)
2. Backends behind the GenerationBackend protocol (OpenAIGeneration / MockGeneration)
3. AnswerSynthesizer with a result-union wrapper and a safe fallback answer
"""

from medical_rag_pipeline.generation.backends import (
    MockGeneration,
    OpenAIGeneration,
    get_generation_backend,
)
from medical_rag_pipeline.generation.prompts import (
    ANSWER_DISCLAIMER,
    FALLBACK_ANSWER,
    NO_INFORMATION_ANSWER,
    OUTAGE_ANSWER,
    SYSTEM_PROMPT,
    build_context,
    build_prompt,
    ensure_disclaimer,
)
from medical_rag_pipeline.generation.synthesizer import (
    AnswerSynthesizer,
    SynthesisError,
    SynthesisResult,
)

__all__ = [
    "AnswerSynthesizer",
    "SynthesisError",
    "SynthesisResult",
    "MockGeneration",
    "OpenAIGeneration",
    "get_generation_backend",
    "ANSWER_DISCLAIMER",
    "FALLBACK_ANSWER",
    "NO_INFORMATION_ANSWER",
    "OUTAGE_ANSWER",
    "SYSTEM_PROMPT",
    "build_context",
    "build_prompt",
    "ensure_disclaimer",
]
