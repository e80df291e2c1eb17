"""
tests/test_connectors.py

HTTP connectors against a fake requests session.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
import requests

import app.connectors.base as base_module
from app.config import ExternalHTTPSettings, GeocodingSettings, InspectionSourceSettings
from app.connectors import (
    ChicagoInspectionsConnector,
    ConnectorRequestError,
    MapboxGeocodingConnector,
    NullGeocodingProvider,
    build_geocoding_provider,
)
from app.domain.inspections import Coordinates


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any, headers: dict[str, str] | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def json(self) -> Any:
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class _FakeSession:
    def __init__(self, responses: list[_FakeResponse]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> _FakeResponse:
        self.calls.append(kwargs)
        return self._responses.pop(0)


@pytest.fixture()
def http_settings() -> ExternalHTTPSettings:
    return ExternalHTTPSettings(
        timeout_seconds=1.0,
        max_retries=2,
        backoff_initial_seconds=0.1,
        backoff_multiplier=2.0,
        rate_limit_per_second=1000.0,
    )


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(base_module.time, "sleep", lambda _: None)


# ---------------------------------------------------------------------------
# Chicago inspections
# ---------------------------------------------------------------------------


def test_fetch_page_builds_query_and_normalizes_rows(http_settings: ExternalHTTPSettings) -> None:
    rows = [
        {
            "license_": "1",
            "dba_name": "A",
            "inspection_id": "10",
            "inspection_date": "2024-02-01T00:00:00.000",
            "results": "Pass",
        },
        {"license_": "2", "dba_name": "B", "inspection_id": None, "inspection_date": "2024-02-01"},
    ]
    session = _FakeSession([_FakeResponse(200, rows)])
    connector = ChicagoInspectionsConnector(
        settings=InspectionSourceSettings(app_token="token-1", page_size=2),
        http_settings=http_settings,
        session=session,
    )

    page = connector.fetch_page(since=date(2024, 1, 1), offset=4)

    params = session.calls[0]["params"]
    assert params["$limit"] == 2
    assert params["$offset"] == 4
    assert params["$order"] == "inspection_date DESC, inspection_id DESC"
    assert params["$where"] == "inspection_date >= '2024-01-01'"
    assert session.calls[0]["headers"] == {"X-App-Token": "token-1"}
    assert page.raw_count == 2
    assert [record.inspection_id for record in page.records] == ["10"]
    assert page.failed_records == 1


def test_fetch_page_retries_then_raises(http_settings: ExternalHTTPSettings) -> None:
    session = _FakeSession([_FakeResponse(503, None)] * 3)
    connector = ChicagoInspectionsConnector(
        settings=InspectionSourceSettings(),
        http_settings=http_settings,
        session=session,
    )

    with pytest.raises(ConnectorRequestError):
        connector.fetch_page(since=date(2024, 1, 1), offset=0)
    assert len(session.calls) == 3


def test_fetch_page_does_not_retry_client_errors(http_settings: ExternalHTTPSettings) -> None:
    session = _FakeSession([_FakeResponse(400, None)])
    connector = ChicagoInspectionsConnector(
        settings=InspectionSourceSettings(),
        http_settings=http_settings,
        session=session,
    )

    with pytest.raises(ConnectorRequestError):
        connector.fetch_page(since=date(2024, 1, 1), offset=0)
    assert len(session.calls) == 1


def test_fetch_page_honors_retry_after(http_settings: ExternalHTTPSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []
    monkeypatch.setattr(base_module.time, "sleep", sleeps.append)
    session = _FakeSession([_FakeResponse(429, None, {"Retry-After": "7"}), _FakeResponse(200, [])])
    connector = ChicagoInspectionsConnector(
        settings=InspectionSourceSettings(),
        http_settings=http_settings,
        session=session,
    )

    page = connector.fetch_page(since=date(2024, 1, 1), offset=0)

    assert page.raw_count == 0
    assert 7.0 in sleeps


# ---------------------------------------------------------------------------
# Mapbox geocoding
# ---------------------------------------------------------------------------


def test_mapbox_returns_lat_lng_from_center(http_settings: ExternalHTTPSettings) -> None:
    session = _FakeSession([_FakeResponse(200, {"features": [{"center": [-87.62, 41.88]}]})])
    connector = MapboxGeocodingConnector(
        settings=GeocodingSettings(token="pk.test"),
        http_settings=http_settings,
        session=session,
    )

    result = connector.geocode("123 N State St, Chicago, IL 60602")

    assert result == Coordinates(latitude=41.88, longitude=-87.62)
    call = session.calls[0]
    assert call["url"].endswith("/123%20N%20State%20St%2C%20Chicago%2C%20IL%2060602.json")
    assert call["params"] == {"access_token": "pk.test", "limit": 1, "country": "US"}


def test_mapbox_without_features_returns_none(http_settings: ExternalHTTPSettings) -> None:
    session = _FakeSession([_FakeResponse(200, {"features": []})])
    connector = MapboxGeocodingConnector(
        settings=GeocodingSettings(token="pk.test"),
        http_settings=http_settings,
        session=session,
    )

    assert connector.geocode("nowhere") is None


def test_provider_factory_without_token(http_settings: ExternalHTTPSettings) -> None:
    provider = build_geocoding_provider(GeocodingSettings(token=None), http_settings)
    assert isinstance(provider, NullGeocodingProvider)
    assert provider.geocode("anything") is None
