"""
db/models/sync_run.py

Audit row for one inspection sync run.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import Date, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, PortableJSON


class SyncRunMode:
    INCREMENTAL = "incremental"
    FULL = "full"


class SyncRunStatus:
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class SyncRun(Base):
    __tablename__ = "sync_runs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    mode: Mapped[str] = mapped_column(String(16), nullable=False, comment="incremental, full")
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=SyncRunStatus.RUNNING,
    )
    since_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    records_fetched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    establishments_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    establishments_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inspections_written: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    violations_written: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    geocode_hits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    geocode_misses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    errors: Mapped[list[Any] | None] = mapped_column(PortableJSON, nullable=True)

    __table_args__ = (
        Index("ix_sync_runs_started_at", "started_at"),
        Index("ix_sync_runs_status", "status"),
    )
