"""
app/services/inspection_sync_service.py

Incremental and full synchronization of the city inspections dataset into
the inspection store.
"""

from __future__ import annotations

import calendar
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from datetime import date, timedelta
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import (
    GeocodingSettings,
    SyncSettings,
    get_external_http_settings,
    get_geocoding_settings,
    get_inspection_source_settings,
    get_sync_settings,
)
from app.connectors import (
    ChicagoInspectionsConnector,
    ConnectorRequestError,
    GeocodingProvider,
    NullGeocodingProvider,
    build_geocoding_provider,
)
from app.domain.inspections import (
    Coordinates,
    EstablishmentBatch,
    SourceInspection,
    SourceInspectionRecord,
    SyncRunOutcome,
    SyncStats,
)
from app.logging_utils import log_event
from app.parsing.violation_parser import parse_violations, unique_by_code
from app.services.geocoder import CachedGeocoder
from db.models.sync_run import SyncRunMode, SyncRunStatus
from db.repositories.establishment_repository import EstablishmentRepository
from db.repositories.inspection_repository import InspectionRepository
from db.repositories.sync_run_repository import SyncRunRepository
from scoring.calculator import summarize_history

logger = logging.getLogger(__name__)


def subtract_months(value: date, months: int) -> date:
    """Shift a date back by whole months, clamping to the month's last day."""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_since_date(
    *,
    latest_stored: date | None,
    today: date,
    full_rebuild: bool,
    safety_margin_days: int,
    lookback_months: int,
) -> date:
    """
    Lower bound for the source query.

    Incremental runs re-read ``safety_margin_days`` before the newest stored
    inspection to pick up late-published records. Empty stores and full
    rebuilds reach back ``lookback_months``.
    """

    if full_rebuild or latest_stored is None:
        return subtract_months(today, lookback_months)
    return latest_stored - timedelta(days=safety_margin_days)


def group_by_license(records: Iterable[SourceInspectionRecord]) -> list[EstablishmentBatch]:
    """
    Group normalized records into one batch per license number.

    Establishment attributes come from the newest record; coordinates come
    from the newest record that has them. Inspections are deduplicated by
    identifier, keeping the first occurrence.
    """

    grouped: dict[str, list[SourceInspectionRecord]] = {}
    for record in records:
        grouped.setdefault(record.license_number, []).append(record)

    batches: list[EstablishmentBatch] = []
    for license_number, group in grouped.items():
        ordered = sorted(group, key=lambda record: record.inspection_date, reverse=True)
        newest = ordered[0]
        located = next(
            (record for record in ordered if record.latitude is not None and record.longitude is not None),
            None,
        )

        inspections: list[SourceInspection] = []
        seen_ids: set[str] = set()
        for record in ordered:
            if record.inspection_id in seen_ids:
                continue
            seen_ids.add(record.inspection_id)
            inspections.append(
                SourceInspection(
                    inspection_id=record.inspection_id,
                    inspection_date=record.inspection_date,
                    inspection_type=record.inspection_type,
                    results=record.results,
                    raw_violations=record.raw_violations,
                    violations=tuple(unique_by_code(parse_violations(record.raw_violations))),
                )
            )

        batches.append(
            EstablishmentBatch(
                license_number=license_number,
                dba_name=newest.dba_name,
                aka_name=newest.aka_name,
                facility_type=newest.facility_type,
                risk_level=newest.risk_level,
                address=newest.address,
                city=newest.city,
                state=newest.state,
                zip=newest.zip,
                latitude=located.latitude if located else None,
                longitude=located.longitude if located else None,
                inspections=tuple(inspections),
            )
        )
    return batches


class InspectionSyncService:
    """
    Fetches inspections page by page and writes them establishment by
    establishment, each in its own transaction.
    """

    def __init__(
        self,
        *,
        connector: ChicagoInspectionsConnector,
        geocoding_provider: GeocodingProvider,
        geocoding_settings: GeocodingSettings,
        sync_settings: SyncSettings,
        max_pages: int = 100,
        page_delay_seconds: float = 0.5,
        max_consecutive_page_failures: int = 3,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._connector = connector
        self._geocoding_provider = geocoding_provider
        self._geocoding_settings = geocoding_settings
        self._sync_settings = sync_settings
        self._max_pages = max(1, max_pages)
        self._page_delay_seconds = max(0.0, page_delay_seconds)
        self._max_consecutive_page_failures = max(1, max_consecutive_page_failures)
        self._sleep = sleep
        self._today = today

    def run(self, *, db: Session, full_rebuild: bool = False) -> SyncRunOutcome:
        """
        Execute one sync run and record it in ``sync_runs``.

        Full rebuilds widen the date window only; no stored data is cleared.
        """

        mode = SyncRunMode.FULL if full_rebuild else SyncRunMode.INCREMENTAL
        inspections = InspectionRepository(db)
        since = compute_since_date(
            latest_stored=inspections.latest_inspection_date(),
            today=self._today(),
            full_rebuild=full_rebuild,
            safety_margin_days=self._sync_settings.safety_margin_days,
            lookback_months=self._sync_settings.lookback_months,
        )

        runs = SyncRunRepository(db)
        run = runs.create_run(mode=mode, since_date=since)
        run_id = run.id
        db.commit()

        stats = SyncStats()
        log_event(logger, logging.INFO, "inspection_sync_started", run_id=run_id, mode=mode, since=since)

        try:
            records = self._fetch_all(since=since, stats=stats)
            if stats.pages_fetched == 0 and stats.pages_failed > 0:
                status = SyncRunStatus.FAILED
            else:
                self._write_batches(db=db, batches=group_by_license(records), stats=stats)
                status = SyncRunStatus.PARTIAL if stats.errors else SyncRunStatus.COMPLETED
        except Exception as exc:
            db.rollback()
            stats.errors.append(f"run aborted: {exc}")
            runs.finish_run(run_id=run_id, status=SyncRunStatus.FAILED, stats=stats)
            db.commit()
            logger.exception("Inspection sync aborted run_id=%s", run_id)
            raise

        runs.finish_run(run_id=run_id, status=status, stats=stats)
        db.commit()

        log_event(
            logger,
            logging.INFO if status == SyncRunStatus.COMPLETED else logging.WARNING,
            "inspection_sync_finished",
            run_id=run_id,
            status=status,
            **{key: value for key, value in stats.as_dict().items() if key != "errors"},
            error_count=len(stats.errors),
        )
        return SyncRunOutcome(run_id=run_id, mode=mode, status=status, since_date=since, stats=stats)

    def _fetch_all(self, *, since: date, stats: SyncStats) -> list[SourceInspectionRecord]:
        page_size = self._connector.page_size
        records: list[SourceInspectionRecord] = []
        offset = 0
        consecutive_failures = 0

        for page_number in range(self._max_pages):
            if page_number > 0 and self._page_delay_seconds > 0:
                self._sleep(self._page_delay_seconds)

            try:
                page = self._connector.fetch_page(since=since, offset=offset, limit=page_size)
            except ConnectorRequestError as exc:
                stats.pages_failed += 1
                consecutive_failures += 1
                stats.errors.append(f"page offset={offset}: {exc}")
                log_event(logger, logging.WARNING, "inspection_page_failed", offset=offset, error=str(exc))
                if consecutive_failures >= self._max_consecutive_page_failures:
                    logger.error(
                        "Inspection source unreachable consecutive_failures=%s offset=%s",
                        consecutive_failures,
                        offset,
                    )
                    break
                offset += page_size
                continue

            consecutive_failures = 0
            stats.pages_fetched += 1
            stats.records_fetched += page.raw_count
            stats.records_dropped += page.failed_records
            records.extend(page.records)

            if page.raw_count < page_size:
                break
            offset += page_size
        else:
            logger.warning("Inspection sync reached page ceiling max_pages=%s", self._max_pages)

        return records

    def _write_batches(self, *, db: Session, batches: Sequence[EstablishmentBatch], stats: SyncStats) -> None:
        geocoder = CachedGeocoder(
            provider=self._geocoding_provider,
            pause_every=self._geocoding_settings.pause_every,
            pause_seconds=self._geocoding_settings.pause_seconds,
            sleep=self._sleep,
        )
        if isinstance(self._geocoding_provider, NullGeocodingProvider):
            logger.warning("No geocoding token configured; establishments without coordinates will be skipped.")

        for batch in batches:
            stats.establishments_seen += 1

            if batch.coordinates is None:
                batch = self._with_stored_coordinates(db, batch)

            if batch.coordinates is None:
                coordinates = geocoder.resolve(batch.address, batch.city, batch.state, batch.zip)
                if coordinates is None:
                    stats.geocode_misses += 1
                    stats.establishments_skipped += 1
                    continue
                stats.geocode_hits += 1
                batch = batch.with_coordinates(coordinates)

            try:
                inspections_written, violations_written = self._write_batch(db, batch)
                db.commit()
            except Exception as exc:  # noqa: BLE001
                db.rollback()
                stats.establishments_failed += 1
                stats.errors.append(f"license={batch.license_number}: {exc}")
                logger.error(
                    "Failed to write establishment license=%s error=%s",
                    batch.license_number,
                    exc,
                )
                continue

            stats.establishments_processed += 1
            stats.inspections_written += inspections_written
            stats.violations_written += violations_written

    @staticmethod
    def _with_stored_coordinates(db: Session, batch: EstablishmentBatch) -> EstablishmentBatch:
        """
        Reuse coordinates already stored for the license so a known
        establishment is never re-geocoded or skipped.
        """

        stored = EstablishmentRepository(db).get_by_license(batch.license_number)
        if stored is None or stored.latitude is None or stored.longitude is None:
            return batch
        return batch.with_coordinates(Coordinates(latitude=stored.latitude, longitude=stored.longitude))

    @staticmethod
    def _write_batch(db: Session, batch: EstablishmentBatch) -> tuple[int, int]:
        establishments = EstablishmentRepository(db)
        inspections = InspectionRepository(db)

        establishment_id = establishments.upsert(batch.establishment_values())
        violations_written = 0
        for inspection in batch.inspections:
            inspection_row_id = inspections.upsert_inspection(establishment_id, inspection)
            violations_written += inspections.insert_violations(inspection_row_id, inspection.violations)

        history = inspections.outcomes_for_establishment(establishment_id)
        establishments.update_derived(establishment_id, summarize_history(history))
        return len(batch.inspections), violations_written


@lru_cache(maxsize=1)
def get_inspection_sync_service() -> InspectionSyncService:
    """
    Build and cache the inspection sync service.
    """

    http_settings = get_external_http_settings()
    source_settings = get_inspection_source_settings()
    geocoding_settings = get_geocoding_settings()
    return InspectionSyncService(
        connector=ChicagoInspectionsConnector(settings=source_settings, http_settings=http_settings),
        geocoding_provider=build_geocoding_provider(geocoding_settings, http_settings),
        geocoding_settings=geocoding_settings,
        sync_settings=get_sync_settings(),
        max_pages=source_settings.max_pages,
        page_delay_seconds=source_settings.page_delay_seconds,
        max_consecutive_page_failures=source_settings.max_consecutive_page_failures,
    )
