"""
app/domain/inspections.py

Domain models for the inspection sync pipeline.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from typing import Any


@dataclass(frozen=True)
class ParsedViolation:
    """
    One structured entry parsed from a raw pipe-delimited violations string.
    """

    code: str
    description: str
    comment: str | None
    is_critical: bool


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class SourceInspectionRecord:
    """
    One normalized row from the external inspections dataset.
    """

    license_number: str
    dba_name: str
    inspection_id: str
    inspection_date: date
    inspection_type: str
    results: str
    aka_name: str | None = None
    facility_type: str = "Restaurant"
    risk_level: int = 2
    address: str = ""
    city: str = "Chicago"
    state: str = "IL"
    zip: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    raw_violations: str | None = None


@dataclass(frozen=True)
class SourceInspection:
    """
    An inspection ready to be written, with its violations already parsed
    and deduplicated by code.
    """

    inspection_id: str
    inspection_date: date
    inspection_type: str
    results: str
    raw_violations: str | None
    violations: tuple[ParsedViolation, ...] = ()

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def critical_count(self) -> int:
        return sum(1 for violation in self.violations if violation.is_critical)


@dataclass(frozen=True)
class EstablishmentBatch:
    """
    All fetched inspections for one license number in a sync run.
    """

    license_number: str
    dba_name: str
    aka_name: str | None
    facility_type: str
    risk_level: int
    address: str
    city: str
    state: str
    zip: str | None
    latitude: float | None
    longitude: float | None
    inspections: tuple[SourceInspection, ...]

    @property
    def coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    def with_coordinates(self, coordinates: Coordinates) -> "EstablishmentBatch":
        return replace(self, latitude=coordinates.latitude, longitude=coordinates.longitude)

    def establishment_values(self) -> dict[str, Any]:
        """
        Mutable establishment attributes written on every upsert.
        """

        return {
            "license_number": self.license_number,
            "dba_name": self.dba_name,
            "aka_name": self.aka_name,
            "facility_type": self.facility_type,
            "risk_level": self.risk_level,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass
class SyncStats:
    """
    Aggregate counters for one sync run.
    """

    pages_fetched: int = 0
    pages_failed: int = 0
    records_fetched: int = 0
    records_dropped: int = 0
    establishments_seen: int = 0
    establishments_processed: int = 0
    establishments_skipped: int = 0
    establishments_failed: int = 0
    inspections_written: int = 0
    violations_written: int = 0
    geocode_hits: int = 0
    geocode_misses: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SyncRunOutcome:
    run_id: Any
    mode: str
    status: str
    since_date: date
    stats: SyncStats
