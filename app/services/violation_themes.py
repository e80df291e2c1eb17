"""
app/services/violation_themes.py

Short category labels describing what an establishment's latest
inspections were cited for.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Protocol

from app.domain.violation_codes import category_for_code, code_number

DEFAULT_THEME_LIMIT = 4

# Keyword -> category, scanned in order; used only when no structured
# violations are stored.
KEYWORD_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("food temperature", "Food Safety"),
    ("cold holding", "Food Safety"),
    ("hot holding", "Food Safety"),
    ("refrigerat", "Food Safety"),
    ("thermometer", "Food Safety"),
    ("cross contamination", "Contamination"),
    ("cross-contamination", "Contamination"),
    ("raw meat", "Contamination"),
    ("hand wash", "Contamination"),
    ("handwash", "Contamination"),
    ("rodent", "Pests/Rodents"),
    ("roach", "Pests/Rodents"),
    ("pest", "Pests/Rodents"),
    ("mouse", "Pests/Rodents"),
    ("mice", "Pests/Rodents"),
    ("droppings", "Pests/Rodents"),
    ("insect", "Pests/Rodents"),
    ("flies", "Pests/Rodents"),
    ("sanitiz", "Facilities"),
    ("disinfect", "Facilities"),
    ("clean", "Facilities"),
    ("dirty", "Facilities"),
    ("debris", "Facilities"),
    ("grease", "Facilities"),
    ("sewage", "Facilities"),
    ("plumbing", "Facilities"),
    ("drain", "Facilities"),
    ("ventilation", "Facilities"),
    ("equipment", "Facilities"),
    ("food storage", "Storage/Labeling"),
    ("label", "Storage/Labeling"),
    ("expired", "Storage/Labeling"),
    ("past date", "Storage/Labeling"),
    ("certificate", "Staff/Certification"),
    ("license", "Staff/Certification"),
    ("permit", "Staff/Certification"),
    ("no city of chicago", "Staff/Certification"),
    ("toxic", "Chemical Safety"),
    ("chemical", "Chemical Safety"),
)


class ViolationLike(Protocol):
    violation_code: str
    is_critical: bool


class InspectionLike(Protocol):
    raw_violations: str | None

    @property
    def violations(self) -> Sequence[ViolationLike]: ...


def themes_from_violations(violations: Iterable[ViolationLike], *, limit: int = DEFAULT_THEME_LIMIT) -> list[str]:
    """
    Rank categories: any critical violation first, then by count, then by
    the lowest code seen in the category.
    """

    counts: Counter[str] = Counter()
    has_critical: dict[str, bool] = {}
    lowest_code: dict[str, int] = {}
    for violation in violations:
        category = category_for_code(violation.violation_code)
        counts[category] += 1
        has_critical[category] = has_critical.get(category, False) or bool(violation.is_critical)
        number = code_number(violation.violation_code)
        number = number if number is not None else 10_000
        lowest_code[category] = min(lowest_code.get(category, number), number)

    ranked = sorted(
        counts,
        key=lambda category: (not has_critical[category], -counts[category], lowest_code[category]),
    )
    return ranked[: max(0, limit)]


def themes_from_text(raw_violations: str | None, *, limit: int = DEFAULT_THEME_LIMIT) -> list[str]:
    if not raw_violations:
        return []
    text = raw_violations.lower()
    themes: list[str] = []
    for keyword, category in KEYWORD_CATEGORIES:
        if keyword in text and category not in themes:
            themes.append(category)
    return themes[: max(0, limit)]


def extract_themes(inspections: Sequence[InspectionLike], *, limit: int = DEFAULT_THEME_LIMIT) -> list[str]:
    """
    Themes for the given inspections (normally just the latest one).

    Structured violations win; raw text is scanned only when none of the
    inspections has any.
    """

    violations = [violation for inspection in inspections for violation in inspection.violations]
    if violations:
        return themes_from_violations(violations, limit=limit)
    raw_text = " | ".join(inspection.raw_violations for inspection in inspections if inspection.raw_violations)
    return themes_from_text(raw_text, limit=limit)
