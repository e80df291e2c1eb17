"""
app/services/summary_cache_service.py

Serves the cached per-establishment summary, regenerating it whenever the
stored copy no longer matches the establishment it describes.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.config import get_summary_settings
from app.domain.summaries import CacheDecision, CacheInvalidReason, SummaryCacheState, SummaryResult
from app.services.violation_themes import DEFAULT_THEME_LIMIT, extract_themes
from db.models.establishment import Establishment
from db.models.inspection import Inspection
from db.repositories.errors import EstablishmentNotFoundError
from db.repositories.establishment_repository import EstablishmentRepository
from db.repositories.inspection_repository import InspectionRepository
from summaries import (
    RecentInspection,
    SummaryContext,
    SummaryGenerationError,
    SummaryGenerator,
    build_fallback_summary,
    build_llm_adapter,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)
RECENT_INSPECTIONS_FOR_CONTEXT = 3
# Inspection dates are Chicago calendar days.
INSPECTION_TIMEZONE = ZoneInfo("America/Chicago")


def as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes read back from the store are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def evaluate_summary_cache(
    state: SummaryCacheState,
    *,
    now: datetime,
    ttl: timedelta = DEFAULT_TTL,
) -> CacheDecision:
    """
    Decide whether a stored summary may be served as-is.

    The summary is valid only if it is younger than ``ttl``, no inspection
    is dated after the Chicago calendar day it was generated, the latest result equals the
    result snapshot, and a score snapshot exists and equals the score.
    Every failing condition is reported.
    """

    generated_at = as_utc(state.summary_generated_at)
    if not state.summary_text or generated_at is None:
        return CacheDecision(valid=False, reasons=(CacheInvalidReason.MISSING,))

    reasons: list[str] = []
    if as_utc(now) - generated_at >= ttl:
        reasons.append(CacheInvalidReason.EXPIRED)
    generated_day = generated_at.astimezone(INSPECTION_TIMEZONE).date()
    if state.latest_inspection_date is not None and state.latest_inspection_date > generated_day:
        reasons.append(CacheInvalidReason.NEWER_INSPECTION)
    if state.summary_result_snapshot is None or state.latest_result != state.summary_result_snapshot:
        reasons.append(CacheInvalidReason.RESULT_CHANGED)
    if state.summary_score_snapshot is None:
        reasons.append(CacheInvalidReason.SCORE_SNAPSHOT_MISSING)
    elif state.summary_score_snapshot != state.score:
        reasons.append(CacheInvalidReason.SCORE_CHANGED)

    return CacheDecision(valid=not reasons, reasons=tuple(reasons))


def cache_state_of(establishment: Establishment) -> SummaryCacheState:
    return SummaryCacheState(
        summary_text=establishment.summary_text,
        summary_generated_at=establishment.summary_generated_at,
        summary_score_snapshot=establishment.summary_score_snapshot,
        summary_result_snapshot=establishment.summary_result_snapshot,
        score=establishment.score,
        latest_result=establishment.latest_result,
        latest_inspection_date=establishment.latest_inspection_date,
    )


def build_summary_context(establishment: Establishment, recent: Sequence[Inspection]) -> SummaryContext:
    latest = recent[0] if recent else None
    return SummaryContext(
        dba_name=establishment.dba_name,
        facility_type=establishment.facility_type or "Restaurant",
        latest_result=establishment.latest_result or "",
        score=establishment.score,
        latest_inspection_date=establishment.latest_inspection_date,
        inspection_type=latest.inspection_type if latest else None,
        violation_count=latest.violation_count if latest else 0,
        critical_count=latest.critical_count if latest else 0,
        raw_violations=latest.raw_violations if latest else None,
        recent_inspections=[
            RecentInspection(
                inspection_date=inspection.inspection_date,
                results=inspection.results,
                violation_count=inspection.violation_count,
                critical_count=inspection.critical_count,
            )
            for inspection in recent
        ],
    )


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class KeyedLocks:
    """
    One lock per key, kept only while some caller holds or waits on it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[uuid.UUID, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: uuid.UUID) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, _LockEntry())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]


class SummaryCacheService:
    """
    Read-validate-regenerate for establishment summaries.

    The sequence runs under a per-establishment lock inside this process.
    Across processes two readers may both regenerate; the write-back is a
    single UPDATE so the last writer wins with a consistent snapshot.
    """

    def __init__(
        self,
        *,
        generator: SummaryGenerator | None,
        ttl: timedelta = DEFAULT_TTL,
        theme_limit: int = DEFAULT_THEME_LIMIT,
        theme_inspection_count: int = 1,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._generator = generator
        self._ttl = ttl
        self._theme_limit = max(1, theme_limit)
        self._theme_inspection_count = max(1, theme_inspection_count)
        self._clock = clock
        self._locks = KeyedLocks()

    def get_summary(self, db: Session, identifier: str) -> SummaryResult:
        """
        Return the summary for an establishment id or license number.

        Raises EstablishmentNotFoundError when nothing matches. Generator
        failures never propagate; the fallback template is served instead.
        """

        establishments = EstablishmentRepository(db)
        establishment = establishments.get_by_identifier(identifier)
        if establishment is None:
            raise EstablishmentNotFoundError(f"Establishment not found: {identifier}")

        recent = InspectionRepository(db).recent_for_establishment(
            establishment.id,
            limit=max(RECENT_INSPECTIONS_FOR_CONTEXT, self._theme_inspection_count),
        )
        themes = extract_themes(recent[: self._theme_inspection_count], limit=self._theme_limit)

        with self._locks.hold(establishment.id):
            db.refresh(establishment)
            decision = evaluate_summary_cache(cache_state_of(establishment), now=self._clock(), ttl=self._ttl)
            if decision.valid:
                return SummaryResult(
                    summary=establishment.summary_text or "",
                    themes=themes,
                    generated_at=as_utc(establishment.summary_generated_at),
                    cached=True,
                )

            logger.info(
                "Regenerating summary establishment_id=%s reasons=%s",
                establishment.id,
                ",".join(decision.reasons),
            )
            text = self._generate(build_summary_context(establishment, recent))
            generated_at = self._clock()
            try:
                establishments.update_summary(
                    establishment.id,
                    summary_text=text,
                    generated_at=generated_at,
                    score_snapshot=establishment.score,
                    result_snapshot=establishment.latest_result,
                )
                db.commit()
            except Exception:
                db.rollback()
                logger.exception("Failed to store summary establishment_id=%s", establishment.id)
                raise

        return SummaryResult(summary=text, themes=themes, generated_at=generated_at, cached=False)

    def _generate(self, context: SummaryContext) -> str:
        if self._generator is None:
            return build_fallback_summary(context)
        try:
            return self._generator.generate(context)
        except SummaryGenerationError as exc:
            logger.warning("Summary generation failed, using fallback error=%s", exc)
            return build_fallback_summary(context)


@lru_cache(maxsize=1)
def get_summary_cache_service() -> SummaryCacheService:
    """
    Build and cache the summary service from settings.
    """

    settings = get_summary_settings()
    adapter = build_llm_adapter(
        settings.adapter,
        model=settings.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )
    return SummaryCacheService(
        generator=SummaryGenerator(adapter) if adapter is not None else None,
        ttl=timedelta(days=settings.ttl_days),
        theme_limit=settings.theme_limit,
        theme_inspection_count=settings.theme_inspection_count,
    )
