"""
tests/test_api_routes.py

HTTP plumbing for the summary, sync and maintenance routers. Services are
replaced with fakes; their behavior is covered in the service tests.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.dependencies import NO_STORE_HEADERS
from app.api.routers import maintenance_router, summary_router, sync_router
from app.api.routers.maintenance_router import get_duplicate_reconciler
from app.domain.inspections import SyncRunOutcome, SyncStats
from app.domain.reconciliation import DuplicateCluster, ReconciliationReport
from app.domain.summaries import SummaryResult
from app.services.inspection_sync_service import get_inspection_sync_service
from app.services.summary_cache_service import get_summary_cache_service
from db.repositories.errors import EstablishmentNotFoundError
from db.session import get_db

GENERATED_AT = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
RUN_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")


class _FakeSummaryService:
    def __init__(self) -> None:
        self.identifiers: list[str] = []

    def get_summary(self, db, identifier: str) -> SummaryResult:
        self.identifiers.append(identifier)
        if identifier == "missing":
            raise EstablishmentNotFoundError(f"Establishment {identifier!r} not found")
        return SummaryResult(
            summary="Passed their latest Chicago inspection.",
            themes=["Pests/Rodents"],
            generated_at=GENERATED_AT,
            cached=True,
        )


class _FakeSyncService:
    def __init__(self) -> None:
        self.calls: list[bool] = []

    def run(self, *, db, full_rebuild: bool = False) -> SyncRunOutcome:
        self.calls.append(full_rebuild)
        stats = SyncStats(pages_fetched=2, records_fetched=1500, establishments_processed=40)
        return SyncRunOutcome(
            run_id=RUN_ID,
            mode="full_rebuild" if full_rebuild else "incremental",
            status="completed",
            since_date=date(2024, 5, 25),
            stats=stats,
        )


class _FakeReconciler:
    def __init__(self) -> None:
        self.calls: list[bool] = []

    def reconcile(self, db, *, execute: bool = False) -> ReconciliationReport:
        self.calls.append(execute)
        cluster = DuplicateCluster(
            identifier="2345678",
            kept_id=uuid.UUID(int=1),
            kept_inspection_id="2345678",
            deleted_ids=(uuid.UUID(int=2), uuid.UUID(int=3)),
        )
        return ReconciliationReport(dry_run=not execute, clusters=[cluster], rows_deleted=2 if execute else 0)


@pytest.fixture
def fakes():
    return {
        "summary": _FakeSummaryService(),
        "sync": _FakeSyncService(),
        "reconciler": _FakeReconciler(),
    }


@pytest.fixture
def client(fakes) -> TestClient:
    application = FastAPI()
    application.include_router(summary_router)
    application.include_router(sync_router)
    application.include_router(maintenance_router)

    def _no_db():
        yield None

    application.dependency_overrides[get_db] = _no_db
    application.dependency_overrides[get_summary_cache_service] = lambda: fakes["summary"]
    application.dependency_overrides[get_inspection_sync_service] = lambda: fakes["sync"]
    application.dependency_overrides[get_duplicate_reconciler] = lambda: fakes["reconciler"]
    return TestClient(application)


def _assert_no_store(response) -> None:
    for header, value in NO_STORE_HEADERS.items():
        assert response.headers[header] == value


def test_summary_endpoint_returns_payload_with_no_store_headers(client, fakes) -> None:
    response = client.get("/establishments/4242/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "Passed their latest Chicago inspection."
    assert body["themes"] == ["Pests/Rodents"]
    assert body["cached"] is True
    assert body["generated_at"].startswith("2024-06-10T12:00:00")
    assert fakes["summary"].identifiers == ["4242"]
    _assert_no_store(response)


def test_summary_endpoint_returns_404_with_no_store_headers(client) -> None:
    response = client.get("/establishments/missing/summary")

    assert response.status_code == 404
    _assert_no_store(response)


def test_sync_endpoint_reports_run(client, fakes) -> None:
    response = client.post("/sync/inspections", params={"full_rebuild": "true"})

    assert response.status_code == 200
    body = response.json()
    assert body["run_id"] == str(RUN_ID)
    assert body["mode"] == "full_rebuild"
    assert body["since_date"] == "2024-05-25"
    assert body["stats"]["records_fetched"] == 1500
    assert body["stats"]["errors"] == []
    assert fakes["sync"].calls == [True]
    _assert_no_store(response)


def test_reconcile_endpoint_defaults_to_dry_run(client, fakes) -> None:
    response = client.post("/maintenance/reconcile-inspections")

    assert response.status_code == 200
    body = response.json()
    assert body["dry_run"] is True
    assert body["total_duplicate_rows"] == 3
    assert body["rows_to_delete"] == 2
    assert body["rows_deleted"] == 0
    assert body["clusters"][0]["kept_id"] == str(uuid.UUID(int=1))
    assert fakes["reconciler"].calls == [False]
    _assert_no_store(response)


def test_reconcile_endpoint_executes_when_asked(client, fakes) -> None:
    response = client.post("/maintenance/reconcile-inspections", params={"execute": "true"})

    assert response.status_code == 200
    assert response.json()["rows_deleted"] == 2
    assert fakes["reconciler"].calls == [True]
