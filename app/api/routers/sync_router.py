"""
app/api/routers/sync_router.py

Inspection sync HTTP endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.dependencies import no_store
from app.schemas.sync import SyncRunResponse, SyncStatsResponse
from app.services.inspection_sync_service import InspectionSyncService, get_inspection_sync_service
from db.session import get_db

router = APIRouter(tags=["sync"])


@router.post("/sync/inspections", response_model=SyncRunResponse)
def sync_inspections(
    response: Response,
    full_rebuild: bool = Query(default=False, description="Re-read the full lookback window"),
    db: Session = Depends(get_db),
    sync_service: InspectionSyncService = Depends(get_inspection_sync_service),
) -> SyncRunResponse:
    """
    Run one inspection sync synchronously and report its counters.
    """

    no_store(response)
    outcome = sync_service.run(db=db, full_rebuild=full_rebuild)
    return SyncRunResponse(
        run_id=outcome.run_id,
        mode=outcome.mode,
        status=outcome.status,
        since_date=outcome.since_date,
        stats=SyncStatsResponse(**outcome.stats.as_dict()),
    )
