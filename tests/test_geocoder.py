"""
tests/test_geocoder.py

CachedGeocoder memoization, throttling and failure handling.
"""

from __future__ import annotations

import threading

from app.connectors.base import ConnectorRequestError
from app.domain.inspections import Coordinates
from app.services.geocoder import CachedGeocoder, build_full_address, memo_key


class _RecordingProvider:
    def __init__(self, known: dict[str, Coordinates] | None = None, fail_on: set[str] | None = None) -> None:
        self.known = known or {}
        self.fail_on = fail_on or set()
        self.queries: list[str] = []

    def geocode(self, query: str) -> Coordinates | None:
        self.queries.append(query)
        if query in self.fail_on:
            raise ConnectorRequestError("mapbox_geocoding: request failed after retries.")
        return self.known.get(query)


def test_full_address_and_key() -> None:
    full = build_full_address("123 N State St", None, None, "60602")
    assert full == "123 N State St, Chicago, IL 60602"
    assert memo_key("  123 N  State St,   CHICAGO ") == "123 n state st, chicago"


def test_hit_is_memoized_per_normalized_address() -> None:
    full = "123 N State St, Chicago, IL 60602"
    provider = _RecordingProvider(known={full: Coordinates(41.88, -87.62)})
    geocoder = CachedGeocoder(provider=provider, sleep=lambda _: None)

    first = geocoder.resolve("123 N State St", "Chicago", "IL", "60602")
    second = geocoder.resolve("123 n state st", "CHICAGO", "il", "60602")

    assert first == Coordinates(41.88, -87.62)
    assert second == first
    assert len(provider.queries) == 1
    assert (geocoder.hits, geocoder.misses, geocoder.memo_hits) == (1, 0, 1)


def test_miss_and_failure_are_memoized() -> None:
    provider = _RecordingProvider(fail_on={"9 Broken Rd, Chicago, IL"})
    geocoder = CachedGeocoder(provider=provider, sleep=lambda _: None)

    assert geocoder.resolve("1 Nowhere Ave") is None
    assert geocoder.resolve("1 Nowhere Ave") is None
    assert geocoder.resolve("9 Broken Rd") is None
    assert geocoder.resolve("9 Broken Rd") is None

    assert len(provider.queries) == 2
    assert geocoder.misses == 2
    assert geocoder.memo_hits == 2


def test_pauses_after_every_batch_of_provider_calls() -> None:
    sleeps: list[float] = []
    geocoder = CachedGeocoder(
        provider=_RecordingProvider(),
        pause_every=10,
        pause_seconds=0.1,
        sleep=sleeps.append,
    )

    for number in range(25):
        geocoder.resolve(f"{number} Main St")

    assert geocoder.provider_calls == 25
    assert sleeps == [0.1, 0.1]


def test_concurrent_callers_share_one_provider_call() -> None:
    full = "5 Lake St, Chicago, IL"
    provider = _RecordingProvider(known={full: Coordinates(41.0, -87.0)})
    geocoder = CachedGeocoder(provider=provider, sleep=lambda _: None)
    results: list[Coordinates | None] = []

    threads = [threading.Thread(target=lambda: results.append(geocoder.resolve("5 Lake St"))) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(provider.queries) == 1
    assert results == [Coordinates(41.0, -87.0)] * 8
