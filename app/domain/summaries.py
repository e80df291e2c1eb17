"""
app/domain/summaries.py

Domain models for the cached establishment summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


class CacheInvalidReason:
    MISSING = "missing"
    EXPIRED = "expired"
    NEWER_INSPECTION = "newer_inspection"
    RESULT_CHANGED = "result_changed"
    SCORE_SNAPSHOT_MISSING = "score_snapshot_missing"
    SCORE_CHANGED = "score_changed"


@dataclass(frozen=True)
class SummaryCacheState:
    """
    The fields of an establishment that decide whether its cached summary
    may be served.
    """

    summary_text: str | None
    summary_generated_at: datetime | None
    summary_score_snapshot: int | None
    summary_result_snapshot: str | None
    score: int | None
    latest_result: str | None
    latest_inspection_date: date | None


@dataclass(frozen=True)
class CacheDecision:
    valid: bool
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class SummaryResult:
    summary: str
    themes: list[str]
    generated_at: datetime
    cached: bool
