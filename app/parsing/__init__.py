"""
app/parsing package marker.
"""

from app.parsing.source_records import (
    normalize_inspection_id,
    normalize_source_row,
    parse_inspection_date,
    parse_risk_level,
)
from app.parsing.violation_parser import parse_violations, unique_by_code

__all__ = [
    "normalize_inspection_id",
    "normalize_source_row",
    "parse_inspection_date",
    "parse_risk_level",
    "parse_violations",
    "unique_by_code",
]
