"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorFetchResult, ConnectorRequestError
from app.connectors.chicago_inspections_connector import ChicagoInspectionsConnector
from app.connectors.mapbox_geocoding_connector import (
    GeocodingProvider,
    MapboxGeocodingConnector,
    NullGeocodingProvider,
    build_geocoding_provider,
)

__all__ = [
    "BaseConnector",
    "ConnectorFetchResult",
    "ConnectorRequestError",
    "ChicagoInspectionsConnector",
    "GeocodingProvider",
    "MapboxGeocodingConnector",
    "NullGeocodingProvider",
    "build_geocoding_provider",
]
