"""
app/api/routers/maintenance_router.py

Store maintenance HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.dependencies import no_store
from app.domain.reconciliation import ReconciliationReport
from app.schemas.reconciliation import (
    DuplicateClusterResponse,
    ReconciliationErrorResponse,
    ReconciliationResponse,
)
from app.services.duplicate_reconciler_service import DuplicateInspectionReconciler
from db.session import get_db

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


def get_duplicate_reconciler() -> DuplicateInspectionReconciler:
    return DuplicateInspectionReconciler()


def to_reconciliation_response(report: ReconciliationReport) -> ReconciliationResponse:
    return ReconciliationResponse(
        dry_run=report.dry_run,
        clusters=[
            DuplicateClusterResponse(
                identifier=cluster.identifier,
                kept_id=cluster.kept_id,
                deleted_ids=list(cluster.deleted_ids),
            )
            for cluster in report.clusters
        ],
        total_duplicate_rows=report.total_duplicate_rows,
        rows_to_delete=report.rows_to_delete,
        rows_deleted=report.rows_deleted,
        errors=[
            ReconciliationErrorResponse(identifier=failure.identifier, error=failure.error)
            for failure in report.errors
        ],
    )


@router.post("/reconcile-inspections", response_model=ReconciliationResponse)
def reconcile_inspections(
    response: Response,
    execute: bool = Query(default=False, description="Delete duplicates instead of only reporting them"),
    db: Session = Depends(get_db),
    reconciler: DuplicateInspectionReconciler = Depends(get_duplicate_reconciler),
) -> ReconciliationResponse:
    """
    Report duplicate inspection clusters; delete redundant rows when
    ``execute`` is true.
    """

    no_store(response)
    return to_reconciliation_response(reconciler.reconcile(db, execute=execute))
