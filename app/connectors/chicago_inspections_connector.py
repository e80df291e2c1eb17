"""
app/connectors/chicago_inspections_connector.py

Connector for the City of Chicago food inspections dataset (Socrata).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import requests

from app.config import ExternalHTTPSettings, InspectionSourceSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult, ConnectorRequestError
from app.domain.inspections import SourceInspectionRecord
from app.parsing.source_records import normalize_source_row

logger = logging.getLogger(__name__)


class ChicagoInspectionsConnector(BaseConnector):
    """
    Pages through inspections newest-first, filtered by inspection date.
    """

    def __init__(
        self,
        *,
        settings: InspectionSourceSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="chicago_inspections", http_settings=http_settings, session=session)
        self._settings = settings

    @property
    def page_size(self) -> int:
        return self._settings.page_size

    def fetch_page(self, *, since: date, offset: int, limit: int | None = None) -> ConnectorFetchResult:
        """
        Fetch one page of inspections on or after ``since``.

        Raises ConnectorRequestError when the request fails after retries or
        the payload is not a JSON list.
        """

        page_limit = limit or self._settings.page_size
        params = {
            "$limit": page_limit,
            "$offset": offset,
            "$order": "inspection_date DESC, inspection_id DESC",
            "$where": f"inspection_date >= '{since.isoformat()}'",
        }
        headers = {"X-App-Token": self._settings.app_token} if self._settings.app_token else None

        payload = self._request_json(method="GET", url=self._settings.url, params=params, headers=headers)
        if not isinstance(payload, list):
            logger.error("Unexpected inspections payload shape offset=%s", offset)
            raise ConnectorRequestError(f"{self.source}: expected a JSON list.")

        records: list[SourceInspectionRecord] = []
        failed_records = 0
        for row in payload:
            normalized = self._normalize_row(row)
            if normalized is None:
                failed_records += 1
                continue
            records.append(normalized)

        logger.info(
            "Fetched inspections page offset=%s rows=%s kept=%s dropped=%s",
            offset,
            len(payload),
            len(records),
            failed_records,
        )
        return ConnectorFetchResult(
            source=self.source,
            offset=offset,
            raw_count=len(payload),
            records=records,
            failed_records=failed_records,
        )

    @staticmethod
    def _normalize_row(row: Any) -> SourceInspectionRecord | None:
        if not isinstance(row, dict):
            return None
        return normalize_source_row(row)
