"""
db/models/establishment.py

Food-service establishment keyed by its city license number.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.inspection import Inspection

LICENSE_UNIQUE_CONSTRAINT = "uq_establishments_license_number"


class Establishment(Base, TimestampMixin):
    """
    One row per license number.

    ``score``, ``latest_result``, ``latest_inspection_date``,
    ``total_inspections`` and ``pass_streak`` mirror the stored inspection
    history and are rewritten by the sync engine. The ``summary_*`` columns
    hold the cached natural-language summary and the snapshot it was
    generated from.
    """

    __tablename__ = "establishments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    license_number: Mapped[str] = mapped_column(String(32), nullable=False)
    dba_name: Mapped[str] = mapped_column(String(255), nullable=False)
    aka_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    facility_type: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        default="Restaurant",
    )
    risk_level: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="1=high risk, 2=medium, 3=low",
    )
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    city: Mapped[str | None] = mapped_column(String(120), nullable=True, default="Chicago")
    state: Mapped[str | None] = mapped_column(String(8), nullable=True, default="IL")
    zip: Mapped[str | None] = mapped_column(String(16), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    latest_result: Mapped[str | None] = mapped_column(String(64), nullable=True)
    latest_inspection_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_inspections: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pass_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    summary_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    summary_score_snapshot: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Score used when summary_text was generated",
    )
    summary_result_snapshot: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="latest_result used when summary_text was generated",
    )

    inspections: Mapped[list["Inspection"]] = relationship(
        back_populates="establishment",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("license_number", name=LICENSE_UNIQUE_CONSTRAINT),
        CheckConstraint("risk_level IN (1, 2, 3)", name="ck_establishments_risk_level"),
        CheckConstraint("score BETWEEN 0 AND 100", name="ck_establishments_score"),
        Index("ix_establishments_score", "score"),
        Index("ix_establishments_latest_inspection_date", "latest_inspection_date"),
        Index("ix_establishments_zip", "zip"),
    )
