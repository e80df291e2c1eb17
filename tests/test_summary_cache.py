"""
tests/test_summary_cache.py

Cache validity truth table and the read-validate-regenerate path.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from app.domain.summaries import CacheInvalidReason, SummaryCacheState
from app.services.summary_cache_service import KeyedLocks, SummaryCacheService, as_utc, evaluate_summary_cache
from db.models import Establishment, Inspection, Violation
from db.repositories.errors import EstablishmentNotFoundError
from summaries import BaseLLMAdapter, MockLLMAdapter, SummaryGenerator

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
GENERATED = datetime(2024, 6, 8, 9, 0, tzinfo=timezone.utc)

VALID_STATE = SummaryCacheState(
    summary_text="Passed their latest Chicago inspection.",
    summary_generated_at=GENERATED,
    summary_score_snapshot=88,
    summary_result_snapshot="Pass",
    score=88,
    latest_result="Pass",
    latest_inspection_date=date(2024, 6, 1),
)


# ---------------------------------------------------------------------------
# Truth table
# ---------------------------------------------------------------------------


def test_valid_when_every_condition_holds() -> None:
    decision = evaluate_summary_cache(VALID_STATE, now=NOW)
    assert decision.valid is True
    assert decision.reasons == ()


@pytest.mark.parametrize(
    ("changes", "reason"),
    [
        ({"summary_text": None}, CacheInvalidReason.MISSING),
        ({"summary_generated_at": None}, CacheInvalidReason.MISSING),
        ({"summary_generated_at": NOW - timedelta(days=7)}, CacheInvalidReason.EXPIRED),
        ({"latest_inspection_date": date(2024, 6, 9)}, CacheInvalidReason.NEWER_INSPECTION),
        ({"latest_result": "Fail"}, CacheInvalidReason.RESULT_CHANGED),
        ({"summary_result_snapshot": None}, CacheInvalidReason.RESULT_CHANGED),
        ({"summary_score_snapshot": None}, CacheInvalidReason.SCORE_SNAPSHOT_MISSING),
        ({"score": 87}, CacheInvalidReason.SCORE_CHANGED),
    ],
)
def test_each_failing_condition_invalidates(changes: dict, reason: str) -> None:
    decision = evaluate_summary_cache(replace(VALID_STATE, **changes), now=NOW)
    assert decision.valid is False
    assert reason in decision.reasons


def test_inspection_on_generation_day_does_not_invalidate() -> None:
    state = replace(VALID_STATE, latest_inspection_date=GENERATED.date())
    assert evaluate_summary_cache(state, now=NOW).valid is True


def test_generation_day_is_the_chicago_calendar_day() -> None:
    # 02:00 UTC on June 9 is still the evening of June 8 in Chicago.
    evening = datetime(2024, 6, 9, 2, 0, tzinfo=timezone.utc)
    state = replace(VALID_STATE, summary_generated_at=evening, latest_inspection_date=date(2024, 6, 9))

    decision = evaluate_summary_cache(state, now=NOW)

    assert decision.reasons == (CacheInvalidReason.NEWER_INSPECTION,)


def test_just_under_ttl_is_still_fresh() -> None:
    state = replace(VALID_STATE, summary_generated_at=NOW - timedelta(days=7) + timedelta(seconds=1))
    assert evaluate_summary_cache(state, now=NOW).valid is True


def test_naive_generated_at_is_read_as_utc() -> None:
    naive = GENERATED.replace(tzinfo=None)
    assert as_utc(naive) == GENERATED
    assert evaluate_summary_cache(replace(VALID_STATE, summary_generated_at=naive), now=NOW).valid is True


def test_all_failing_conditions_are_reported() -> None:
    state = replace(
        VALID_STATE,
        summary_generated_at=NOW - timedelta(days=30),
        latest_result="Fail",
        summary_score_snapshot=None,
    )
    reasons = evaluate_summary_cache(state, now=NOW).reasons
    assert set(reasons) >= {
        CacheInvalidReason.EXPIRED,
        CacheInvalidReason.NEWER_INSPECTION,
        CacheInvalidReason.RESULT_CHANGED,
        CacheInvalidReason.SCORE_SNAPSHOT_MISSING,
    }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class _FailingAdapter(BaseLLMAdapter):
    def __init__(self) -> None:
        self.calls = 0

    def generate(self, prompt, system=None) -> str:
        self.calls += 1
        raise TimeoutError("upstream timeout")


def _seed(db: Session, **overrides: object) -> Establishment:
    values = {
        "license_number": "4242",
        "dba_name": "Corner Cafe",
        "address": "10 W Lake St",
        "score": 71,
        "latest_result": "Pass w/ Conditions",
        "latest_inspection_date": date(2024, 6, 1),
        "total_inspections": 1,
    }
    values.update(overrides)
    establishment = Establishment(**values)
    db.add(establishment)
    db.flush()
    inspection = Inspection(
        establishment_id=establishment.id,
        inspection_id="81",
        inspection_date=date(2024, 6, 1),
        inspection_type="Complaint",
        results="Pass w/ Conditions",
        raw_violations="38. INSECTS, RODENTS - Comments: DROPPINGS | 3. MANAGEMENT - Comments: NONE",
        violation_count=2,
        critical_count=1,
    )
    db.add(inspection)
    db.flush()
    db.add_all(
        [
            Violation(inspection_id=inspection.id, violation_code="38", violation_description="INSECTS", is_critical=False),
            Violation(inspection_id=inspection.id, violation_code="3", violation_description="MANAGEMENT", is_critical=True),
        ]
    )
    db.commit()
    return establishment


def _service(adapter: BaseLLMAdapter | None) -> SummaryCacheService:
    return SummaryCacheService(
        generator=SummaryGenerator(adapter) if adapter is not None else None,
        clock=lambda: NOW,
    )


def test_missing_summary_is_generated_and_written_back(db_session: Session) -> None:
    establishment = _seed(db_session)
    adapter = MockLLMAdapter(response="Received a Conditional Pass. CleanPlate rates them 71/100.")

    result = _service(adapter).get_summary(db_session, str(establishment.id))
    db_session.refresh(establishment)

    assert result.cached is False
    assert result.summary == "Received a Conditional Pass. CleanPlate rates them 71/100."
    assert result.generated_at == NOW
    assert result.themes == ["Staff/Certification", "Pests/Rodents"]
    assert establishment.summary_text == result.summary
    assert as_utc(establishment.summary_generated_at) == NOW
    assert establishment.summary_score_snapshot == 71
    assert establishment.summary_result_snapshot == "Pass w/ Conditions"
    assert "Corner Cafe" in adapter.prompts[0]


def test_second_read_is_served_from_cache(db_session: Session) -> None:
    establishment = _seed(db_session)
    adapter = MockLLMAdapter()
    service = _service(adapter)

    service.get_summary(db_session, "4242")
    second = service.get_summary(db_session, "4242")

    assert second.cached is True
    assert len(adapter.prompts) == 1
    assert second.themes == ["Staff/Certification", "Pests/Rodents"]
    assert second.generated_at == NOW


def test_score_change_forces_regeneration(db_session: Session) -> None:
    establishment = _seed(db_session)
    adapter = MockLLMAdapter()
    service = _service(adapter)
    service.get_summary(db_session, "4242")

    establishment.score = 64
    db_session.commit()
    result = service.get_summary(db_session, "4242")

    assert result.cached is False
    assert len(adapter.prompts) == 2
    db_session.refresh(establishment)
    assert establishment.summary_score_snapshot == 64


def test_generator_failure_falls_back_and_is_stored(db_session: Session) -> None:
    establishment = _seed(db_session)
    adapter = _FailingAdapter()

    result = _service(adapter).get_summary(db_session, "4242")
    db_session.refresh(establishment)

    assert adapter.calls == 1
    assert result.cached is False
    assert result.summary == "Conditional pass - follow-up required for 2 issues."
    assert establishment.summary_text == result.summary


def test_no_generator_uses_fallback(db_session: Session) -> None:
    _seed(db_session, latest_result="Pass", score=90)

    result = _service(None).get_summary(db_session, "4242")

    assert result.summary == "Passed but 1 item need attention."
    assert result.cached is False


def test_unknown_identifier_raises(db_session: Session) -> None:
    with pytest.raises(EstablishmentNotFoundError):
        _service(MockLLMAdapter()).get_summary(db_session, "does-not-exist")


# ---------------------------------------------------------------------------
# Per-establishment locks
# ---------------------------------------------------------------------------


def test_keyed_locks_forget_keys_nobody_holds() -> None:
    locks = KeyedLocks()
    key = uuid.uuid4()

    with locks.hold(key):
        assert len(locks) == 1

    assert len(locks) == 0


def test_keyed_locks_serialize_holders_of_one_key() -> None:
    locks = KeyedLocks()
    key = uuid.uuid4()
    order: list[str] = []
    started = threading.Event()

    def _second_holder() -> None:
        started.set()
        with locks.hold(key):
            order.append("second")

    with locks.hold(key):
        worker = threading.Thread(target=_second_holder)
        worker.start()
        started.wait(timeout=1)
        order.append("first")
    worker.join(timeout=1)

    assert order == ["first", "second"]
    assert len(locks) == 0
