"""
app/parsing/source_records.py

Normalization of raw inspection dataset rows.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Mapping

from app.domain.inspections import SourceInspectionRecord

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y",
)

DEFAULT_RISK_LEVEL = 2

_NON_DIGITS = re.compile(r"\D")


def normalize_inspection_id(value: Any) -> str:
    """
    Reduce an inspection identifier to its numeric source id.

    Older imports stored synthetic ids such as
    ``"2627108-2024-11-14T00:00:00.000"``; both that and ``"2627108"`` map
    to ``"2627108"``. Identifiers with no digits before the first dash are
    returned trimmed and otherwise unchanged.
    """

    text = str(value).strip()
    head = text.split("-", 1)[0]
    digits = _NON_DIGITS.sub("", head)
    return digits or text


def parse_risk_level(raw: Any) -> int:
    """
    Map a risk label such as ``"Risk 1 (High)"`` to 1, 2 or 3.
    """

    if not raw:
        return DEFAULT_RISK_LEVEL
    text = str(raw).lower()
    if "1" in text or "high" in text:
        return 1
    if "2" in text or "medium" in text:
        return 2
    if "3" in text or "low" in text:
        return 3
    return DEFAULT_RISK_LEVEL


def parse_inspection_date(raw: Any) -> date | None:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not raw:
        return None
    text = str(raw).strip()
    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            continue
    return None


def normalize_source_row(row: Mapping[str, Any]) -> SourceInspectionRecord | None:
    """
    Convert one raw dataset row into a SourceInspectionRecord.

    Returns None when a required field (license number, business name,
    inspection id, inspection date) is missing or unparseable.
    """

    license_number = _clean(row.get("license_"))
    dba_name = _clean(row.get("dba_name"))
    raw_inspection_id = _clean(row.get("inspection_id"))
    inspection_date = parse_inspection_date(row.get("inspection_date"))
    if not license_number or not dba_name or not raw_inspection_id or inspection_date is None:
        return None

    return SourceInspectionRecord(
        license_number=license_number,
        dba_name=dba_name,
        aka_name=_clean(row.get("aka_name")),
        facility_type=_clean(row.get("facility_type")) or "Restaurant",
        risk_level=parse_risk_level(row.get("risk")),
        address=_clean(row.get("address")) or "",
        city=_clean(row.get("city")) or "Chicago",
        state=_clean(row.get("state")) or "IL",
        zip=_clean(row.get("zip")),
        latitude=_parse_coordinate(row.get("latitude")),
        longitude=_parse_coordinate(row.get("longitude")),
        inspection_id=normalize_inspection_id(raw_inspection_id),
        inspection_date=inspection_date,
        inspection_type=_clean(row.get("inspection_type")) or "Canvass",
        results=_clean(row.get("results")) or "Pass",
        raw_violations=_clean(row.get("violations")),
    )


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_coordinate(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if parsed == 0:
        return None
    return parsed
