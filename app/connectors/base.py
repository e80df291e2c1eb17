"""
app/connectors/base.py

Shared HTTP mechanics for the inspection source and geocoding connectors.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import requests

from app.config import ExternalHTTPSettings
from app.domain.inspections import SourceInspectionRecord

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
MAX_RETRY_AFTER_SECONDS = 60.0


class ConnectorRequestError(RuntimeError):
    """
    Raised when a connector cannot fetch data after retries.
    """


@dataclass(frozen=True)
class ConnectorFetchResult:
    """
    One fetched page with its normalized records.

    ``raw_count`` is the number of rows the source returned, before rows
    missing required fields were dropped; pagination stops on it.
    """

    source: str
    offset: int
    raw_count: int
    records: list[SourceInspectionRecord] = field(default_factory=list)
    failed_records: int = 0


def retry_after_seconds(response: requests.Response | None) -> float | None:
    """
    Seconds requested by a numeric ``Retry-After`` header, capped; None
    when absent or given as an HTTP date.
    """

    if response is None:
        return None
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return min(MAX_RETRY_AFTER_SECONDS, max(0.0, float(raw)))
    except ValueError:
        return None


class BaseConnector:
    """
    Outbound HTTP with a client-side rate limit and exponential backoff.

    Timeouts, connection errors and RETRYABLE_STATUS_CODES are retried up
    to ``max_retries`` times; any other HTTP error fails immediately.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._http = http_settings
        rate = http_settings.rate_limit_per_second
        self._min_interval_seconds = 1.0 / rate if rate > 0 else 0.0
        self._last_request_monotonic = 0.0

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = self._request(method=method, url=url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(f"{self.source}: response was not valid JSON.") from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        last_error: Exception | None = None
        attempts = self._http.max_retries + 1
        for attempt in range(attempts):
            failed_response: requests.Response | None = None
            try:
                return self._send(method=method, url=url, params=params, headers=headers)
            except requests.HTTPError as exc:
                last_error = exc
                failed_response = exc.response
                status_code = failed_response.status_code if failed_response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error("Connector request failed source=%s status=%s", self.source, status_code)
                    raise ConnectorRequestError(
                        f"{self.source}: request failed with HTTP {status_code}."
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt + 1 >= attempts:
                break
            wait_seconds = self._retry_delay(attempt, failed_response)
            logger.warning(
                "Connector request retry source=%s attempt=%s/%s wait_seconds=%.2f error=%s",
                self.source,
                attempt + 1,
                self._http.max_retries,
                wait_seconds,
                last_error,
            )
            time.sleep(wait_seconds)

        logger.error("Connector request exhausted retries source=%s error=%s", self.source, last_error)
        raise ConnectorRequestError(f"{self.source}: request failed after retries.") from last_error

    def _send(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
    ) -> requests.Response:
        self._throttle()
        response = self._session.request(
            method=method,
            url=url,
            params=params,
            headers=headers,
            timeout=self._http.timeout_seconds,
        )
        response.raise_for_status()
        return response

    def _retry_delay(self, attempt: int, response: requests.Response | None) -> float:
        requested = retry_after_seconds(response)
        if requested is not None:
            return requested
        return self._http.backoff_initial_seconds * (self._http.backoff_multiplier**attempt)

    def _throttle(self) -> None:
        if self._min_interval_seconds <= 0:
            return
        remaining = self._min_interval_seconds - (time.monotonic() - self._last_request_monotonic)
        if remaining > 0:
            time.sleep(remaining)
        self._last_request_monotonic = time.monotonic()
