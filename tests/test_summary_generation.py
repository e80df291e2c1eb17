from datetime import date

import pytest
from pydantic import ValidationError

from summaries import (
    MockLLMAdapter,
    RecentInspection,
    SummaryContext,
    SummaryGenerationError,
    SummaryGenerator,
    SummaryPromptBuilder,
    build_fallback_summary,
    build_llm_adapter,
)


def _context(**overrides) -> SummaryContext:
    values = {
        "dba_name": "Taco Palace",
        "facility_type": "Restaurant",
        "latest_result": "Pass",
        "score": 85,
        "latest_inspection_date": date(2024, 5, 1),
        "inspection_type": "Canvass",
        "violation_count": 0,
        "critical_count": 0,
    }
    values.update(overrides)
    return SummaryContext(**values)


# ---------------------------------------------------------------------------
# Fallback templates
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        ({}, "Clean inspection with no issues found."),
        ({"violation_count": 1}, "Passed with 1 minor note."),
        ({"violation_count": 3}, "Passed with 3 minor notes."),
        ({"violation_count": 3, "critical_count": 2}, "Passed but 2 items need attention."),
        ({"latest_result": "Pass w/ Conditions", "violation_count": 4}, "Conditional pass - follow-up required for 4 issues."),
        ({"latest_result": "Fail", "violation_count": 1}, "Did not pass. 1 violation found."),
        ({"latest_result": "Fail", "violation_count": 6}, "Did not pass. 6 violations found."),
    ],
)
def test_fallback_templates(overrides: dict, expected: str) -> None:
    assert build_fallback_summary(_context(**overrides)) == expected


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def test_prompt_contains_result_score_history_and_truncated_violations() -> None:
    context = _context(
        raw_violations="X" * 1500,
        recent_inspections=[
            RecentInspection(inspection_date=date(2024, 5, 1), results="Pass", violation_count=0, critical_count=0),
            RecentInspection(inspection_date=date(2023, 5, 1), results="Fail", violation_count=4, critical_count=2),
            RecentInspection(inspection_date=date(2022, 5, 1), results="Pass", violation_count=1, critical_count=0),
            RecentInspection(inspection_date=date(2021, 5, 1), results="Fail", violation_count=9, critical_count=3),
        ],
    )

    prompt = SummaryPromptBuilder().build_prompt(context)

    assert "Restaurant: Taco Palace (Restaurant)" in prompt
    assert "Official Chicago Inspection Result: Pass" in prompt
    assert "CleanPlate Score (our calculated rating): 85/100" in prompt
    assert "Previous (May 2023): Fail - 4 violations (2 critical)" in prompt
    assert "2021" not in prompt
    assert "X" * 1000 in prompt
    assert "X" * 1001 not in prompt


def test_system_instructions_separate_result_from_score() -> None:
    assert "does NOT give a numeric score" in SummaryPromptBuilder.system_instructions


# ---------------------------------------------------------------------------
# Generator and adapters
# ---------------------------------------------------------------------------


def test_generator_strips_quotes_and_whitespace() -> None:
    generator = SummaryGenerator(MockLLMAdapter(response='  "Passed cleanly."  '))
    assert generator.generate(_context()) == "Passed cleanly."


def test_generator_rejects_empty_output() -> None:
    with pytest.raises(SummaryGenerationError):
        SummaryGenerator(MockLLMAdapter(response="   ")).generate(_context())


def test_adapter_factory() -> None:
    kwargs = {"model": "gpt-4o-mini", "max_tokens": 150, "temperature": 0.7, "base_url": None}
    assert isinstance(build_llm_adapter("mock", api_key=None, **kwargs), MockLLMAdapter)
    assert build_llm_adapter("openai", api_key=None, **kwargs) is None


def test_context_rejects_out_of_range_score() -> None:
    with pytest.raises(ValidationError):
        _context(score=140)
