"""
Establishment repository: license-keyed upsert, derived fields and the
cached summary columns.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from db.models.establishment import Establishment
from db.repositories.upsert import dialect_insert
from scoring.calculator import HistorySummary

_MUTABLE_COLUMNS = (
    "dba_name",
    "aka_name",
    "facility_type",
    "risk_level",
    "address",
    "city",
    "state",
    "zip",
    "latitude",
    "longitude",
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class EstablishmentRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, values: dict[str, Any]) -> uuid.UUID:
        """
        Insert or update an establishment keyed on ``license_number``.

        Derived and summary columns are never touched here. Returns the id
        of the existing or newly inserted row. The caller commits.
        """

        payload = {"id": uuid.uuid4(), **values}
        stmt = dialect_insert(self._session, Establishment).values(payload)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Establishment.license_number],
            set_={
                **{column: getattr(stmt.excluded, column) for column in _MUTABLE_COLUMNS},
                "updated_at": _now_utc(),
            },
        ).returning(Establishment.id)
        return self._session.scalars(stmt).one()

    def update_derived(self, establishment_id: uuid.UUID, summary: HistorySummary) -> None:
        self._session.execute(
            update(Establishment)
            .where(Establishment.id == establishment_id)
            .values(
                score=summary.score,
                latest_result=summary.latest_result,
                latest_inspection_date=summary.latest_inspection_date,
                total_inspections=summary.total_inspections,
                pass_streak=summary.pass_streak,
                updated_at=_now_utc(),
            )
        )

    def get(self, establishment_id: uuid.UUID) -> Establishment | None:
        return self._session.get(Establishment, establishment_id)

    def get_by_license(self, license_number: str) -> Establishment | None:
        stmt = select(Establishment).where(Establishment.license_number == license_number)
        return self._session.scalars(stmt).one_or_none()

    def get_by_identifier(self, identifier: str) -> Establishment | None:
        """
        Resolve an establishment by UUID, falling back to license number.
        """

        text = identifier.strip()
        try:
            establishment_id = uuid.UUID(text)
        except ValueError:
            return self.get_by_license(text)
        return self.get(establishment_id)

    def update_summary(
        self,
        establishment_id: uuid.UUID,
        *,
        summary_text: str,
        generated_at: datetime,
        score_snapshot: int | None,
        result_snapshot: str | None,
    ) -> None:
        """
        Write summary text and its snapshot in one UPDATE statement.
        """

        self._session.execute(
            update(Establishment)
            .where(Establishment.id == establishment_id)
            .values(
                summary_text=summary_text,
                summary_generated_at=generated_at,
                summary_score_snapshot=score_snapshot,
                summary_result_snapshot=result_snapshot,
            )
            .execution_options(synchronize_session="fetch")
        )
