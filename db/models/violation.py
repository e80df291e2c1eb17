"""
db/models/violation.py

Coded deficiency recorded during an inspection.
At most one row per (inspection, violation_code).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.inspection import Inspection

VIOLATION_UNIQUE_CONSTRAINT = "uq_violations_inspection_code"


class Violation(Base):
    __tablename__ = "violations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    inspection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("inspections.id", ondelete="CASCADE"),
        nullable=False,
    )
    violation_code: Mapped[str] = mapped_column(String(16), nullable=False)
    violation_description: Mapped[str] = mapped_column(Text, nullable=False)
    violation_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_critical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    inspection: Mapped["Inspection"] = relationship(back_populates="violations")

    __table_args__ = (
        UniqueConstraint("inspection_id", "violation_code", name=VIOLATION_UNIQUE_CONSTRAINT),
        Index("ix_violations_inspection_id", "inspection_id"),
    )
