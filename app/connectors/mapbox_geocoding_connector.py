"""
app/connectors/mapbox_geocoding_connector.py

Forward geocoding through the Mapbox places API.
"""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

import requests

from app.config import ExternalHTTPSettings, GeocodingSettings
from app.connectors.base import BaseConnector
from app.domain.inspections import Coordinates

logger = logging.getLogger(__name__)


class GeocodingProvider(Protocol):
    def geocode(self, query: str) -> Coordinates | None:
        """Return coordinates for a free-text address, or None when unknown."""


class NullGeocodingProvider:
    """
    Provider used when no geocoding token is configured; resolves nothing.
    """

    def geocode(self, query: str) -> Coordinates | None:
        return None


class MapboxGeocodingConnector(BaseConnector):
    def __init__(
        self,
        *,
        settings: GeocodingSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="mapbox_geocoding", http_settings=http_settings, session=session)
        self._settings = settings

    def geocode(self, query: str) -> Coordinates | None:
        """
        Return the best match for ``query``.

        Raises ConnectorRequestError on transport failure; an empty feature
        list returns None.
        """

        url = f"{self._settings.base_url.rstrip('/')}/{quote(query, safe='')}.json"
        payload = self._request_json(
            method="GET",
            url=url,
            params={
                "access_token": self._settings.token,
                "limit": 1,
                "country": self._settings.country,
            },
        )

        features = payload.get("features") if isinstance(payload, dict) else None
        if not features:
            return None
        center = features[0].get("center") if isinstance(features[0], dict) else None
        if not isinstance(center, list) or len(center) < 2:
            logger.warning("Geocoding feature without center query=%s", query)
            return None

        longitude, latitude = center[0], center[1]
        try:
            return Coordinates(latitude=float(latitude), longitude=float(longitude))
        except (TypeError, ValueError):
            return None


def build_geocoding_provider(
    settings: GeocodingSettings,
    http_settings: ExternalHTTPSettings,
) -> GeocodingProvider:
    if not settings.token:
        return NullGeocodingProvider()
    return MapboxGeocodingConnector(settings=settings, http_settings=http_settings)
