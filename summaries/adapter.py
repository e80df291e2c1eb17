"""LLM adapters for summary generation.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for testing.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted user prompt.
            system: Optional system instructions.

        Returns:
            Raw string response from the model.
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Tuned for short, varied prose rather than structured output.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 150,
        temperature: float = 0.7,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            temperature: Sampling temperature.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        from openai import OpenAI

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        client_kwargs: dict = {"api_key": resolved_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            stream=False,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


_MOCK_RESPONSE = (
    "Passed their latest Chicago inspection. "
    "CleanPlate rates them based on their recent inspection history."
)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed summary.

    Used for local testing and CI pipelines where no LLM API
    is available.
    """

    def __init__(self, response: str = _MOCK_RESPONSE) -> None:
        self._response = response
        self.prompts: list = []

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        return self._response


def build_llm_adapter(
    adapter: str,
    *,
    model: str,
    max_tokens: int,
    temperature: float,
    api_key: Optional[str],
    base_url: Optional[str],
) -> Optional[BaseLLMAdapter]:
    """Select an adapter by name.

    Returns None for ``openai`` without an API key; callers then serve
    the deterministic fallback summary only.
    """
    if adapter == "mock":
        return MockLLMAdapter()
    if not api_key:
        logger.warning("No LLM API key configured; summaries will use the fallback template.")
        return None
    return OpenAILLMAdapter(
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        api_key=api_key,
        base_url=base_url,
    )
