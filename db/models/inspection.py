"""
db/models/inspection.py

One dated inspection visit, keyed by the normalized source identifier.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.establishment import Establishment
    from db.models.violation import Violation

INSPECTION_UNIQUE_CONSTRAINT = "uq_inspections_inspection_id"


class InspectionResult:
    PASS = "Pass"
    PASS_WITH_CONDITIONS = "Pass w/ Conditions"
    FAIL = "Fail"
    OUT_OF_BUSINESS = "Out of Business"


class Inspection(Base):
    __tablename__ = "inspections"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    establishment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("establishments.id", ondelete="CASCADE"),
        nullable=False,
    )
    inspection_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Normalized external inspection identifier",
    )
    inspection_date: Mapped[date] = mapped_column(Date, nullable=False)
    inspection_type: Mapped[str] = mapped_column(String(120), nullable=False, default="Canvass")
    results: Mapped[str] = mapped_column(String(64), nullable=False)
    raw_violations: Mapped[str | None] = mapped_column(Text, nullable=True)
    violation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    critical_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    establishment: Mapped["Establishment"] = relationship(back_populates="inspections")
    violations: Mapped[list["Violation"]] = relationship(
        back_populates="inspection",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("inspection_id", name=INSPECTION_UNIQUE_CONSTRAINT),
        Index("ix_inspections_establishment_id", "establishment_id"),
        Index("ix_inspections_inspection_date", "inspection_date"),
        Index("ix_inspections_results", "results"),
    )
