"""Prompt builder for consumer inspection summaries."""

from typing import List

from summaries.schema import RecentInspection, SummaryContext

MAX_HISTORY_ENTRIES = 3
MAX_RAW_VIOLATION_CHARS = 1000

SYSTEM_INSTRUCTIONS = """\
You write concise, informative 2-3 sentence summaries of restaurant health \
inspection results for consumers. Be direct and factual, and focus on what \
matters to someone deciding whether to eat there. Mention trends when the \
history shows them (improving, declining, recurring issues). Do not be \
alarming, but be honest. Use plain language. Aim for 200-300 characters.

Two different things must never be confused:
1. Chicago's official result: the city issues only Pass, Conditional Pass or \
Fail. It does NOT give a numeric score.
2. CleanPlate score: our own 0-100 rating computed from inspection history \
and violations.

Never write things like "scored X/100 on their inspection". Correct phrasing:
- "received a Conditional Pass from Chicago inspectors. CleanPlate rates them 61/100 based on..."
- "passed their latest Chicago inspection. With a CleanPlate score of 85, they show..."
- "failed their Chicago inspection. CleanPlate rates them 35/100 due to..."

"Conditional Pass" is its own result type, not "passed with conditions".
"""

_CLOSING_INSTRUCTION = (
    "Write a consumer-friendly summary (2-3 sentences, 200-300 chars) that highlights "
    "the most important information for someone deciding whether to eat here. Include "
    "trend context if the inspection history shows improvement or decline. Remember: "
    "Chicago gives Pass/Conditional/Fail only; the numeric score is CleanPlate's rating."
)

_HISTORY_LABELS = ("Latest", "Previous", "Earlier")


class SummaryPromptBuilder:
    """Builds the user prompt for one establishment."""

    system_instructions = SYSTEM_INSTRUCTIONS

    def build_prompt(self, context: SummaryContext) -> str:
        score = f"{context.score}/100" if context.score is not None else "not yet rated"
        parts: List[str] = [
            f"Restaurant: {context.dba_name} ({context.facility_type})",
            f"Official Chicago Inspection Result: {context.latest_result or 'Unknown'}",
            f"CleanPlate Score (our calculated rating): {score}",
            (
                f"Violations from latest inspection: {context.violation_count} total, "
                f"{context.critical_count} critical"
            ),
        ]
        if context.inspection_type:
            parts.append(f"Inspection type: {context.inspection_type}")

        if len(context.recent_inspections) > 1:
            history = self._format_history(context.recent_inspections[:MAX_HISTORY_ENTRIES])
            parts.append(f"\nRecent Inspection History:\n{history}")

        if context.raw_violations:
            parts.append(f"\nKey Violation Details: {context.raw_violations[:MAX_RAW_VIOLATION_CHARS]}")

        parts.append(f"\n{_CLOSING_INSTRUCTION}")
        return "\n".join(parts)

    @staticmethod
    def _format_history(inspections: List[RecentInspection]) -> str:
        lines = []
        for index, inspection in enumerate(inspections):
            label = _HISTORY_LABELS[min(index, len(_HISTORY_LABELS) - 1)]
            when = inspection.inspection_date.strftime("%b %Y")
            lines.append(
                f"{label} ({when}): {inspection.results} - {inspection.violation_count} "
                f"violations ({inspection.critical_count} critical)"
            )
        return "\n".join(lines)
