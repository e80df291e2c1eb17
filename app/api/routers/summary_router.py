"""
app/api/routers/summary_router.py

Establishment summary HTTP endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import no_store
from app.schemas.summary import SummaryResponse
from app.services.summary_cache_service import SummaryCacheService, get_summary_cache_service
from db.repositories.errors import EstablishmentNotFoundError
from db.session import get_db

router = APIRouter(tags=["summaries"])


@router.get("/establishments/{identifier}/summary", response_model=SummaryResponse)
def get_establishment_summary(
    identifier: str,
    response: Response,
    db: Session = Depends(get_db),
    summary_service: SummaryCacheService = Depends(get_summary_cache_service),
) -> SummaryResponse:
    """
    Return the summary for an establishment id or license number,
    regenerating it when the cached copy is stale.
    """

    no_store(response)
    try:
        result = summary_service.get_summary(db, identifier)
    except EstablishmentNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
            headers=dict(response.headers),
        ) from exc

    return SummaryResponse(
        summary=result.summary,
        themes=result.themes,
        generated_at=result.generated_at,
        cached=result.cached,
    )
