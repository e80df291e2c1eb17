"""
app/domain/violation_codes.py

Chicago violation code table.

This module is the only place that decides whether a code is critical or
which category it belongs to. The parser, the score calculator and the
theme extraction all read from here.
"""

from __future__ import annotations

CRITICAL_CODE_MIN = 1
CRITICAL_CODE_MAX = 29
NON_CRITICAL_EXCEPTIONS = frozenset({15})

# (first code, last code, label); ranges are inclusive and ordered.
_CODE_CATEGORIES: tuple[tuple[int, int, str], ...] = (
    (1, 5, "Staff/Certification"),
    (6, 20, "Food Safety"),
    (21, 31, "Contamination"),
    (32, 37, "Storage/Labeling"),
    (38, 38, "Pests/Rodents"),
    (39, 42, "Chemical Safety"),
    (43, 58, "Facilities"),
    (59, 10_000, "Prior Violations"),
)

OTHER_CATEGORY = "Other"


def code_number(code: str | int | None) -> int | None:
    """
    Return the numeric part of a violation code, or None when it has none.
    """

    if code is None:
        return None
    if isinstance(code, int):
        return code
    digits = ""
    for char in str(code).strip():
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else None


def is_critical_code(code: str | int | None) -> bool:
    """
    Critical codes are 1-29, except 15. Everything else, including codes
    with no numeric part, is non-critical.
    """

    number = code_number(code)
    if number is None:
        return False
    return CRITICAL_CODE_MIN <= number <= CRITICAL_CODE_MAX and number not in NON_CRITICAL_EXCEPTIONS


def category_for_code(code: str | int | None) -> str:
    number = code_number(code)
    if number is None:
        return OTHER_CATEGORY
    for first, last, label in _CODE_CATEGORIES:
        if first <= number <= last:
            return label
    return OTHER_CATEGORY
