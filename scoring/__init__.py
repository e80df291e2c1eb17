"""
scoring package.

Pure functions deriving the CleanPlate score and history figures from an
establishment's stored inspections.
"""

from scoring.calculator import (
    HistorySummary,
    InspectionOutcome,
    compute_score,
    is_pass,
    latest_inspection,
    pass_streak,
    summarize_history,
)

__all__ = [
    "HistorySummary",
    "InspectionOutcome",
    "compute_score",
    "is_pass",
    "latest_inspection",
    "pass_streak",
    "summarize_history",
]
