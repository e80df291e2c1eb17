"""
app/scheduler/jobs.py

APScheduler-based batch scheduler for the daily incremental inspection sync.

Schedule (UTC)
--------------
  daily_inspection_sync: every day at SYNC_SCHEDULER_HOUR_UTC (default 06:00)

The scheduler is started and stopped by the FastAPI ``lifespan`` in
app/main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_sync_settings
from app.services.inspection_sync_service import get_inspection_sync_service
from db.session import session_scope

logger = logging.getLogger(__name__)

DAILY_SYNC_JOB_ID = "daily_inspection_sync"


def run_daily_inspection_sync() -> None:
    """
    Run one incremental sync. The service commits per establishment and
    records the run; failures are logged, never raised into the scheduler.
    """
    logger.info("Scheduler: %s starting", DAILY_SYNC_JOB_ID)
    try:
        with session_scope() as db:
            outcome = get_inspection_sync_service().run(db=db, full_rebuild=False)
    except Exception:  # noqa: BLE001
        logger.exception("Scheduler: %s failed", DAILY_SYNC_JOB_ID)
        return
    logger.info(
        "Scheduler: %s finished run_id=%s status=%s inspections_written=%d",
        DAILY_SYNC_JOB_ID,
        outcome.run_id,
        outcome.status,
        outcome.stats.inspections_written,
    )


def build_scheduler() -> BackgroundScheduler:
    """
    Return a configured but not yet started ``BackgroundScheduler``.

    No job is registered when SYNC_SCHEDULER_ENABLED is false.
    """
    scheduler = BackgroundScheduler(timezone="UTC")
    settings = get_sync_settings()
    if not settings.scheduler_enabled:
        logger.info("Scheduler: inspection sync disabled")
        return scheduler

    scheduler.add_job(
        run_daily_inspection_sync,
        trigger="cron",
        hour=settings.scheduler_hour_utc,
        minute=0,
        id=DAILY_SYNC_JOB_ID,
        name="Daily incremental inspection sync",
        replace_existing=True,
        misfire_grace_time=3600,
        max_instances=1,
        coalesce=True,
    )
    return scheduler
