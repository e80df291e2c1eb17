"""
app/parsing/violation_parser.py

Parser for the pipe-delimited violations column of the inspections dataset.

Each entry looks like::

    38. INSECTS, RODENTS, & ANIMALS NOT PRESENT - Comments: OBSERVED DROPPINGS

Entries without a leading ``<code>.`` are dropped; they never fail the
record they belong to.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from app.domain.inspections import ParsedViolation
from app.domain.violation_codes import is_critical_code

ENTRY_SEPARATOR = "|"

_ENTRY_PATTERN = re.compile(
    r"^(?P<code>\d+)\.\s*(?P<description>.+?)(?:\s*-\s*Comments:\s*(?P<comment>.*))?$",
    re.IGNORECASE | re.DOTALL,
)


def parse_violations(raw: str | None) -> list[ParsedViolation]:
    """
    Parse a raw violations string into structured violations.

    Returns an empty list for None, blank input, or input with no
    well-formed entries.
    """

    if not raw or not raw.strip():
        return []

    violations: list[ParsedViolation] = []
    for part in raw.split(ENTRY_SEPARATOR):
        entry = part.strip()
        if not entry:
            continue
        parsed = _parse_entry(entry)
        if parsed is not None:
            violations.append(parsed)
    return violations


def unique_by_code(violations: Iterable[ParsedViolation]) -> list[ParsedViolation]:
    """
    Keep the first violation for each code, preserving order.
    """

    seen: set[str] = set()
    unique: list[ParsedViolation] = []
    for violation in violations:
        if violation.code in seen:
            continue
        seen.add(violation.code)
        unique.append(violation)
    return unique


def _parse_entry(entry: str) -> ParsedViolation | None:
    match = _ENTRY_PATTERN.match(entry)
    if match is None:
        return None

    code = str(int(match.group("code")))
    description = match.group("description").strip()
    if not description:
        return None
    comment = (match.group("comment") or "").strip() or None

    return ParsedViolation(
        code=code,
        description=description,
        comment=comment,
        is_critical=is_critical_code(code),
    )
