"""
scoring/calculator.py

CleanPlate score calculator.

The score starts from a base of 80, earns up to 15 points for the share of
passed inspections and loses points for every recorded violation, with an
extra penalty for critical ones. It is always computed over the full
stored history of an establishment.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

BASE_SCORE: float = 80.0
PASS_RATE_WEIGHT: float = 15.0
VIOLATION_PENALTY: float = 1.0
CRITICAL_PENALTY: float = 3.0

MIN_SCORE = 0
MAX_SCORE = 100

PASS_RESULT = "pass"


@dataclass(frozen=True)
class InspectionOutcome:
    """
    The parts of an inspection the score depends on.
    """

    inspection_date: date
    results: str
    violation_count: int
    critical_count: int


@dataclass(frozen=True)
class HistorySummary:
    score: int
    latest_result: str | None
    latest_inspection_date: date | None
    total_inspections: int
    pass_streak: int


def is_pass(result: str | None) -> bool:
    """Exact, case-insensitive match on "Pass"; conditional passes do not count."""
    if result is None:
        return False
    return result.strip().lower() == PASS_RESULT


def compute_score(history: Iterable[InspectionOutcome]) -> int:
    """Compute the 0-100 score for an inspection history.

    Args:
        history: Every stored inspection of one establishment, in any order.

    Returns:
        An integer in [0, 100]. An empty history scores the base value.
    """
    inspections = list(history)
    total = len(inspections)

    value = BASE_SCORE
    if total > 0:
        pass_count = sum(1 for inspection in inspections if is_pass(inspection.results))
        value += (pass_count / total) * PASS_RATE_WEIGHT

    total_violations = sum(max(0, inspection.violation_count) for inspection in inspections)
    critical_violations = sum(max(0, inspection.critical_count) for inspection in inspections)
    value -= total_violations * VIOLATION_PENALTY
    value -= critical_violations * CRITICAL_PENALTY

    return _clamp(_round_half_up(value))


def latest_inspection(history: Iterable[InspectionOutcome]) -> InspectionOutcome | None:
    """Return the most recent inspection; the first one wins on equal dates."""
    latest: InspectionOutcome | None = None
    for inspection in history:
        if latest is None or inspection.inspection_date > latest.inspection_date:
            latest = inspection
    return latest


def pass_streak(history: Iterable[InspectionOutcome]) -> int:
    """Count consecutive passes starting from the most recent inspection."""
    ordered = _newest_first(history)
    streak = 0
    for inspection in ordered:
        if not is_pass(inspection.results):
            break
        streak += 1
    return streak


def summarize_history(history: Iterable[InspectionOutcome]) -> HistorySummary:
    inspections = list(history)
    latest = latest_inspection(inspections)
    return HistorySummary(
        score=compute_score(inspections),
        latest_result=latest.results if latest is not None else None,
        latest_inspection_date=latest.inspection_date if latest is not None else None,
        total_inspections=len(inspections),
        pass_streak=pass_streak(inspections),
    )


def _newest_first(history: Iterable[InspectionOutcome]) -> Sequence[InspectionOutcome]:
    return sorted(history, key=lambda inspection: inspection.inspection_date, reverse=True)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))
