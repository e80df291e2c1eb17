from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator, Callable

from fastapi import FastAPI

from app.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Validate configuration at startup, before any database connection.

    Every settings getter is called so that one ConfigurationError lists
    all problems at once:
    - DATABASE_URL (or its local/cloud variants) must point at PostgreSQL.
    - CHICAGO_INSPECTIONS_URL may be omitted but not set to an empty string.
    - LLM_ADAPTER must be 'openai' or 'mock'. A missing API key is not an
      error; summaries then use the fallback template.
    """

    from app.config import get_inspection_source_settings, get_summary_settings
    from db.config import ConfigurationError, get_database_settings

    checks: tuple[Callable[[], object], ...] = (
        get_database_settings,
        get_inspection_source_settings,
        get_summary_settings,
    )
    errors: list[str] = []
    for check in checks:
        try:
            check()
        except ConfigurationError as exc:
            errors.append(str(exc))

    if errors:
        raise ConfigurationError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _check_store() -> None:
    """
    Confirm the store is reachable and migrated.

    Does NOT auto-migrate; the operator runs 'alembic upgrade head'.
    """
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(sa_inspect(connection).get_table_names())
    except Exception as exc:
        raise RuntimeError("Inspection store unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical("Store is missing tables %s. Run 'alembic upgrade head' and restart.", missing)
        raise RuntimeError(f"Inspection store is not migrated; missing tables: {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Check the store and start the sync scheduler on boot; shut it down on exit."""
    _check_store()
    logger.info("Inspection store reachable and migrated")

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shut down")


def register_routes(application: FastAPI) -> FastAPI:
    from app.api.routers import maintenance_router, summary_router, sync_router

    application.include_router(summary_router)
    application.include_router(sync_router)
    application.include_router(maintenance_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging()
    _validate_env()

    application = FastAPI(
        title="CleanPlate Inspections API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    return register_routes(application)


app = create_app()
