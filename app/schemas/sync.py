"""
app/schemas/sync.py

Response schemas for inspection sync runs.
"""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field


class SyncStatsResponse(BaseModel):
    pages_fetched: int = Field(..., ge=0)
    pages_failed: int = Field(..., ge=0)
    records_fetched: int = Field(..., ge=0)
    records_dropped: int = Field(..., ge=0)
    establishments_seen: int = Field(..., ge=0)
    establishments_processed: int = Field(..., ge=0)
    establishments_skipped: int = Field(..., ge=0)
    establishments_failed: int = Field(..., ge=0)
    inspections_written: int = Field(..., ge=0)
    violations_written: int = Field(..., ge=0)
    geocode_hits: int = Field(..., ge=0)
    geocode_misses: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)


class SyncRunResponse(BaseModel):
    """
    API response model for one completed sync run.
    """

    run_id: uuid.UUID
    mode: str
    status: str
    since_date: date
    stats: SyncStatsResponse
