"""
Inspection and violation repository.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date, datetime
from typing import NamedTuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from app.domain.inspections import ParsedViolation, SourceInspection
from db.models.inspection import Inspection
from db.models.violation import Violation
from db.repositories.upsert import dialect_insert
from scoring.calculator import InspectionOutcome


class InspectionIdentity(NamedTuple):
    id: uuid.UUID
    inspection_id: str
    created_at: datetime


class InspectionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def latest_inspection_date(self) -> date | None:
        return self._session.scalar(select(func.max(Inspection.inspection_date)))

    def upsert_inspection(self, establishment_id: uuid.UUID, inspection: SourceInspection) -> uuid.UUID:
        """
        Insert or update one inspection keyed on its normalized identifier.
        """

        stmt = dialect_insert(self._session, Inspection).values(
            id=uuid.uuid4(),
            establishment_id=establishment_id,
            inspection_id=inspection.inspection_id,
            inspection_date=inspection.inspection_date,
            inspection_type=inspection.inspection_type,
            results=inspection.results,
            raw_violations=inspection.raw_violations,
            violation_count=inspection.violation_count,
            critical_count=inspection.critical_count,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Inspection.inspection_id],
            set_={
                "establishment_id": stmt.excluded.establishment_id,
                "inspection_date": stmt.excluded.inspection_date,
                "inspection_type": stmt.excluded.inspection_type,
                "results": stmt.excluded.results,
                "raw_violations": stmt.excluded.raw_violations,
                "violation_count": stmt.excluded.violation_count,
                "critical_count": stmt.excluded.critical_count,
            },
        ).returning(Inspection.id)
        return self._session.scalars(stmt).one()

    def insert_violations(self, inspection_row_id: uuid.UUID, violations: Sequence[ParsedViolation]) -> int:
        """
        Insert violations, ignoring codes already stored for the inspection.

        Returns the number of rows actually inserted.
        """

        if not violations:
            return 0

        payloads = [
            {
                "id": uuid.uuid4(),
                "inspection_id": inspection_row_id,
                "violation_code": violation.code,
                "violation_description": violation.description,
                "violation_comment": violation.comment,
                "is_critical": violation.is_critical,
            }
            for violation in violations
        ]
        stmt = (
            dialect_insert(self._session, Violation)
            .values(payloads)
            .on_conflict_do_nothing(index_elements=[Violation.inspection_id, Violation.violation_code])
            .returning(Violation.id)
        )
        return len(self._session.scalars(stmt).all())

    def outcomes_for_establishment(self, establishment_id: uuid.UUID) -> list[InspectionOutcome]:
        stmt = select(
            Inspection.inspection_date,
            Inspection.results,
            Inspection.violation_count,
            Inspection.critical_count,
        ).where(Inspection.establishment_id == establishment_id)
        return [
            InspectionOutcome(
                inspection_date=row.inspection_date,
                results=row.results,
                violation_count=row.violation_count,
                critical_count=row.critical_count,
            )
            for row in self._session.execute(stmt)
        ]

    def recent_for_establishment(self, establishment_id: uuid.UUID, *, limit: int = 3) -> list[Inspection]:
        """
        Most recent inspections first, with violations eagerly loaded.
        """

        stmt = (
            select(Inspection)
            .where(Inspection.establishment_id == establishment_id)
            .options(selectinload(Inspection.violations))
            .order_by(Inspection.inspection_date.desc(), Inspection.created_at.desc())
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def list_identities(self) -> list[InspectionIdentity]:
        """
        Every inspection's id, external identifier and creation time,
        oldest first.
        """

        stmt = select(Inspection.id, Inspection.inspection_id, Inspection.created_at).order_by(
            Inspection.created_at.asc()
        )
        return [InspectionIdentity(*row) for row in self._session.execute(stmt)]

    def establishment_ids_for(self, inspection_row_ids: Sequence[uuid.UUID]) -> set[uuid.UUID]:
        if not inspection_row_ids:
            return set()
        stmt = select(Inspection.establishment_id).where(Inspection.id.in_(list(inspection_row_ids)))
        return set(self._session.scalars(stmt))

    def delete_inspections(self, inspection_row_ids: Sequence[uuid.UUID]) -> int:
        """
        Delete inspections and their violations, violations first.

        Returns the number of inspection rows deleted.
        """

        if not inspection_row_ids:
            return 0
        ids = list(inspection_row_ids)
        self._session.execute(
            delete(Violation)
            .where(Violation.inspection_id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(
            delete(Inspection).where(Inspection.id.in_(ids)).execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def set_inspection_identifier(self, inspection_row_id: uuid.UUID, inspection_id: str) -> None:
        self._session.execute(
            update(Inspection)
            .where(Inspection.id == inspection_row_id)
            .values(inspection_id=inspection_id)
            .execution_options(synchronize_session=False)
        )
