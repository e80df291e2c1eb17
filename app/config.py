"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import ConfigurationError, load_env_files

DEFAULT_CHICAGO_INSPECTIONS_URL = "https://data.cityofchicago.org/resource/4ijn-s7e5.json"
DEFAULT_MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"
DEFAULT_LLM_MODEL = "gpt-4o-mini"

_ALLOWED_LLM_ADAPTERS = {"openai", "mock"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class InspectionSourceSettings:
    """
    City inspections dataset connector settings.
    """

    url: str = DEFAULT_CHICAGO_INSPECTIONS_URL
    app_token: str | None = None
    page_size: int = 1000
    max_pages: int = 100
    page_delay_seconds: float = 0.5
    max_consecutive_page_failures: int = 3


@dataclass(frozen=True)
class GeocodingSettings:
    """
    Geocoding provider and throttle settings.
    """

    token: str | None = None
    base_url: str = DEFAULT_MAPBOX_GEOCODING_URL
    country: str = "US"
    pause_every: int = 10
    pause_seconds: float = 0.1


@dataclass(frozen=True)
class SyncSettings:
    """
    Watermark and scheduling settings for the inspection sync.
    """

    safety_margin_days: int = 7
    lookback_months: int = 36
    scheduler_enabled: bool = True
    scheduler_hour_utc: int = 6


@dataclass(frozen=True)
class SummarySettings:
    """
    Cached summary and generator settings.
    """

    ttl_days: int = 7
    theme_limit: int = 4
    theme_inspection_count: int = 1
    adapter: str = "openai"
    model: str = DEFAULT_LLM_MODEL
    api_key: str | None = None
    base_url: str | None = None
    max_tokens: int = 150
    temperature: float = 0.7


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_inspection_source_settings() -> InspectionSourceSettings:
    """
    Return inspections dataset settings.

    Raises ConfigurationError when CHICAGO_INSPECTIONS_URL is set but blank
    after stripping, since there is no source to sync from.
    """

    _load_env_once()
    raw_url = os.getenv("CHICAGO_INSPECTIONS_URL")
    if raw_url is not None and not raw_url.strip():
        raise ConfigurationError("CHICAGO_INSPECTIONS_URL is set but empty.")

    return InspectionSourceSettings(
        url=_get_str_env("CHICAGO_INSPECTIONS_URL", DEFAULT_CHICAGO_INSPECTIONS_URL),
        app_token=_get_optional_str_env("SOCRATA_APP_TOKEN"),
        page_size=max(1, _get_int_env("INSPECTIONS_PAGE_SIZE", 1000)),
        max_pages=max(1, _get_int_env("INSPECTIONS_MAX_PAGES", 100)),
        page_delay_seconds=max(0.0, _get_float_env("INSPECTIONS_PAGE_DELAY_SECONDS", 0.5)),
        max_consecutive_page_failures=max(1, _get_int_env("INSPECTIONS_MAX_CONSECUTIVE_PAGE_FAILURES", 3)),
    )


@lru_cache(maxsize=1)
def get_geocoding_settings() -> GeocodingSettings:
    """
    Return geocoding settings from environment variables.
    """

    return GeocodingSettings(
        token=_get_optional_str_env("MAPBOX_TOKEN"),
        base_url=_get_str_env("MAPBOX_GEOCODING_URL", DEFAULT_MAPBOX_GEOCODING_URL),
        country=_get_str_env("GEOCODING_COUNTRY", "US"),
        pause_every=max(1, _get_int_env("GEOCODING_PAUSE_EVERY", 10)),
        pause_seconds=max(0.0, _get_float_env("GEOCODING_PAUSE_SECONDS", 0.1)),
    )


@lru_cache(maxsize=1)
def get_sync_settings() -> SyncSettings:
    """
    Return sync watermark and scheduler settings.
    """

    return SyncSettings(
        safety_margin_days=max(0, _get_int_env("SYNC_SAFETY_MARGIN_DAYS", 7)),
        lookback_months=max(1, _get_int_env("SYNC_LOOKBACK_MONTHS", 36)),
        scheduler_enabled=_get_bool_env("SYNC_SCHEDULER_ENABLED", True),
        scheduler_hour_utc=min(23, max(0, _get_int_env("SYNC_SCHEDULER_HOUR_UTC", 6))),
    )


@lru_cache(maxsize=1)
def get_summary_settings() -> SummarySettings:
    """
    Return summary cache and generator settings.

    OPENAI_API_KEY takes precedence over LLM_API_KEY. An unknown
    LLM_ADAPTER raises ConfigurationError.
    """

    adapter = _get_str_env("LLM_ADAPTER", "openai").lower()
    if adapter not in _ALLOWED_LLM_ADAPTERS:
        raise ConfigurationError(
            f"LLM_ADAPTER '{adapter}' is not valid. Allowed values: {sorted(_ALLOWED_LLM_ADAPTERS)}."
        )

    return SummarySettings(
        ttl_days=max(1, _get_int_env("SUMMARY_TTL_DAYS", 7)),
        theme_limit=max(1, _get_int_env("SUMMARY_THEME_LIMIT", 4)),
        theme_inspection_count=max(1, _get_int_env("SUMMARY_THEME_INSPECTIONS", 1)),
        adapter=adapter,
        model=_get_str_env("LLM_MODEL", DEFAULT_LLM_MODEL),
        api_key=_get_optional_str_env("OPENAI_API_KEY") or _get_optional_str_env("LLM_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        max_tokens=max(1, _get_int_env("LLM_MAX_TOKENS", 150)),
        temperature=_get_float_env("LLM_TEMPERATURE", 0.7),
    )
