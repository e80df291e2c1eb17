"""Deterministic summary used when no generator output is available."""

from summaries.schema import SummaryContext


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def build_fallback_summary(context: SummaryContext) -> str:
    """Build a one-sentence summary from the latest result and counts."""
    result = context.latest_result.lower()
    violations = context.violation_count
    critical = context.critical_count

    if not result:
        return "No inspection results are available yet."
    if "condition" in result:
        return f"Conditional pass - follow-up required for {_plural(violations, 'issue')}."
    if "pass" in result and "fail" not in result:
        if violations == 0:
            return "Clean inspection with no issues found."
        if critical == 0:
            return f"Passed with {_plural(violations, 'minor note')}."
        return f"Passed but {_plural(critical, 'item')} need attention."
    if "out of business" in result:
        return "This establishment is listed as out of business."
    return f"Did not pass. {_plural(violations, 'violation')} found."
