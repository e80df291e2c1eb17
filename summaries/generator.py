"""Summary generation on top of an LLM adapter."""

import logging
from typing import Optional

from summaries.adapter import BaseLLMAdapter
from summaries.prompt_builder import SummaryPromptBuilder
from summaries.schema import SummaryContext

logger = logging.getLogger(__name__)

_QUOTE_CHARS = "\"'"


class SummaryGenerationError(Exception):
    """Raised when the adapter fails or returns nothing usable."""


class SummaryGenerator:
    """Turns a SummaryContext into summary text through an adapter."""

    def __init__(self, adapter: BaseLLMAdapter, prompt_builder: Optional[SummaryPromptBuilder] = None) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or SummaryPromptBuilder()

    def generate(self, context: SummaryContext) -> str:
        """Generate summary text.

        Args:
            context: Establishment facts to summarize.

        Returns:
            The trimmed summary text.

        Raises:
            SummaryGenerationError: The adapter raised, or returned empty text.
        """
        prompt = self._prompt_builder.build_prompt(context)
        try:
            raw = self._adapter.generate(prompt, system=self._prompt_builder.system_instructions)
        except Exception as exc:
            raise SummaryGenerationError(f"Adapter call failed: {exc}") from exc

        text = (raw or "").strip().strip(_QUOTE_CHARS).strip()
        if not text:
            raise SummaryGenerationError("Adapter returned an empty summary.")
        return text
