"""Input contract for summary generation."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecentInspection(BaseModel):
    """One past inspection, used for trend context."""

    model_config = ConfigDict(frozen=True)

    inspection_date: date
    results: str
    violation_count: int = Field(ge=0)
    critical_count: int = Field(ge=0)


class SummaryContext(BaseModel):
    """Everything the generator may say about an establishment.

    ``violation_count``, ``critical_count``, ``inspection_type`` and
    ``raw_violations`` describe the latest inspection only.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    dba_name: str = Field(min_length=1)
    facility_type: str = "Restaurant"
    latest_result: str = ""
    score: Optional[int] = Field(default=None, ge=0, le=100)
    latest_inspection_date: Optional[date] = None
    inspection_type: Optional[str] = None
    violation_count: int = Field(default=0, ge=0)
    critical_count: int = Field(default=0, ge=0)
    raw_violations: Optional[str] = None
    recent_inspections: List[RecentInspection] = Field(default_factory=list)
