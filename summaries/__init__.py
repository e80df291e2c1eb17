"""Consumer-facing inspection summary generation."""

from summaries.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter, build_llm_adapter
from summaries.fallback import build_fallback_summary
from summaries.generator import SummaryGenerationError, SummaryGenerator
from summaries.prompt_builder import SummaryPromptBuilder
from summaries.schema import RecentInspection, SummaryContext

__all__ = [
    "BaseLLMAdapter",
    "MockLLMAdapter",
    "OpenAILLMAdapter",
    "build_llm_adapter",
    "build_fallback_summary",
    "SummaryGenerationError",
    "SummaryGenerator",
    "SummaryPromptBuilder",
    "RecentInspection",
    "SummaryContext",
]
