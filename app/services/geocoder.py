"""
app/services/geocoder.py

Memoized, throttled address resolution used by the sync engine.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from collections.abc import Callable

from app.connectors.mapbox_geocoding_connector import GeocodingProvider
from app.domain.inspections import Coordinates

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_DETAILED_FAILURE_LOGS = 5


def build_full_address(address: str, city: str | None, state: str | None, zip_code: str | None) -> str:
    return f"{address}, {city or 'Chicago'}, {state or 'IL'} {zip_code or ''}".strip()


def memo_key(full_address: str) -> str:
    return _WHITESPACE.sub(" ", full_address.strip().lower())


class CachedGeocoder:
    """
    Resolves addresses through a provider, remembering hits and misses.

    One instance lives for one sync run. The provider is called while the
    lock is held, so concurrent callers resolving the same address share a
    single provider call.
    """

    def __init__(
        self,
        *,
        provider: GeocodingProvider,
        pause_every: int = 10,
        pause_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._provider = provider
        self._pause_every = max(1, pause_every)
        self._pause_seconds = max(0.0, pause_seconds)
        self._sleep = sleep
        self._memo: dict[str, Coordinates | None] = {}
        self._lock = threading.Lock()
        self.provider_calls = 0
        self.hits = 0
        self.misses = 0
        self.memo_hits = 0

    def resolve(
        self,
        address: str,
        city: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
    ) -> Coordinates | None:
        full_address = build_full_address(address, city, state, zip_code)
        key = memo_key(full_address)

        with self._lock:
            if key in self._memo:
                self.memo_hits += 1
                return self._memo[key]

            coordinates = self._call_provider(full_address)
            self._memo[key] = coordinates
            if coordinates is None:
                self.misses += 1
            else:
                self.hits += 1
            return coordinates

    def _call_provider(self, full_address: str) -> Coordinates | None:
        if self.provider_calls > 0 and self.provider_calls % self._pause_every == 0:
            self._sleep(self._pause_seconds)
        self.provider_calls += 1

        try:
            return self._provider.geocode(full_address)
        except Exception as exc:  # noqa: BLE001
            failures = self.misses + 1
            if failures <= _DETAILED_FAILURE_LOGS:
                logger.warning("Geocoding failed address=%s error=%s", full_address, exc)
            else:
                logger.debug("Geocoding failed address=%s error=%s", full_address, exc)
            return None
