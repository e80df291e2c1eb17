"""
app/schemas/reconciliation.py

Response schemas for the duplicate inspection repair pass.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field


class DuplicateClusterResponse(BaseModel):
    identifier: str
    kept_id: uuid.UUID
    deleted_ids: list[uuid.UUID]


class ReconciliationErrorResponse(BaseModel):
    identifier: str
    error: str


class ReconciliationResponse(BaseModel):
    """
    API response model for a dry run or executed reconciliation.
    """

    dry_run: bool
    clusters: list[DuplicateClusterResponse] = Field(default_factory=list)
    total_duplicate_rows: int = Field(..., ge=0)
    rows_to_delete: int = Field(..., ge=0)
    rows_deleted: int = Field(..., ge=0)
    errors: list[ReconciliationErrorResponse] = Field(default_factory=list)
