"""
Repository for sync run lifecycle persistence and lookup.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.inspections import SyncStats
from db.models.sync_run import SyncRun, SyncRunStatus


class SyncRunRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_run(self, *, mode: str, since_date: date | None) -> SyncRun:
        run = SyncRun(
            mode=mode,
            status=SyncRunStatus.RUNNING,
            since_date=since_date,
            started_at=datetime.now(timezone.utc),
            errors=[],
        )
        self._session.add(run)
        self._session.flush()
        return run

    def get_run(self, run_id: uuid.UUID) -> SyncRun | None:
        return self._session.get(SyncRun, run_id)

    def list_runs(self, *, limit: int = 20) -> list[SyncRun]:
        stmt = select(SyncRun).order_by(SyncRun.started_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def finish_run(self, *, run_id: uuid.UUID, status: str, stats: SyncStats) -> SyncRun | None:
        run = self.get_run(run_id)
        if run is None:
            return None
        run.status = status
        run.completed_at = datetime.now(timezone.utc)
        run.records_fetched = stats.records_fetched
        run.establishments_processed = stats.establishments_processed
        run.establishments_skipped = stats.establishments_skipped
        run.inspections_written = stats.inspections_written
        run.violations_written = stats.violations_written
        run.geocode_hits = stats.geocode_hits
        run.geocode_misses = stats.geocode_misses
        run.errors = list(stats.errors)
        return run
