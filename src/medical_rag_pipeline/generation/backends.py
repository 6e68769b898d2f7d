"""
Generation backends - text completion behind the GenerationBackend protocol.

Pattern: Protocol -> Implementation -> Test double -> Factory

1. OpenAIGeneration - chat model through langchain-openai
2. MockGeneration - extractive, deterministic, no network
3. get_generation_backend() - Factory function

Backends raise GenerationUnavailable on ANY failure, including an empty
completion. They never return "" to the caller.
"""

from __future__ import annotations

import logging
import os
import re

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from openai import OpenAIError

from medical_rag_pipeline.core.errors import GenerationUnavailable

logger = logging.getLogger(__name__)


class OpenAIGeneration:
    """
    OpenAI chat model backend.

    Models are created lazily, one per sampling configuration, so a
    missing key surfaces as GenerationUnavailable at call time. Retries
    are disabled: a failed call is answered with the fallback once.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str | None = None,
        timeout: float = 60.0,
    ):
        self.model = model
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._timeout = timeout
        self._llms: dict[tuple[float, float, int], ChatOpenAI] = {}

    def _get_llm(self, temperature: float, top_p: float, max_tokens: int) -> ChatOpenAI:
        if not self._api_key:
            raise GenerationUnavailable("OPENAI_API_KEY is not set")
        key = (temperature, top_p, max_tokens)
        if key not in self._llms:
            self._llms[key] = ChatOpenAI(
                model=self.model,
                api_key=self._api_key,
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._llms[key]

    def generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float = 0.3,
        top_p: float = 0.8,
        max_tokens: int = 1000,
    ) -> str:
        llm = self._get_llm(temperature, top_p, max_tokens)
        try:
            response = llm.invoke([SystemMessage(content=system_prompt), HumanMessage(content=prompt)])
        except OpenAIError as e:
            raise GenerationUnavailable(f"Generation request failed: {e}", cause=e) from e

        text = response.content if isinstance(response.content, str) else ""
        if not text.strip():
            raise GenerationUnavailable("Generation backend returned an empty answer")
        return text


_CONTENT_RE = re.compile(r"^Content: (.+)$", re.MULTILINE)
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


class MockGeneration:
    """
    Mock generation backend for testing without API calls.

    Extractive: answers with the first sentence of each context document.
    Deterministic, so identical prompts give identical answers.
    NOT for production use.
    """

    def __init__(self, max_sentences: int = 3):
        self.max_sentences = max_sentences
        self.calls = 0

    def generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float = 0.3,
        top_p: float = 0.8,
        max_tokens: int = 1000,
    ) -> str:
        self.calls += 1
        sentences = [
            _SENTENCE_RE.split(content.strip())[0]
            for content in _CONTENT_RE.findall(prompt)
        ][: self.max_sentences]

        if not sentences:
            return "The provided context does not contain enough information to answer this question."
        return "According to the reference documents: " + " ".join(sentences)


def get_generation_backend(use_mock: bool = False, model: str = "gpt-4o-mini"):
    """
    Factory function to get the appropriate generation backend.

    Args:
        use_mock: If True, return MockGeneration (for testing)
        model: OpenAI chat model name
    """
    if use_mock:
        return MockGeneration()
    return OpenAIGeneration(model=model)
