"""
API schema exports.
"""

from app.schemas.reconciliation import (
    DuplicateClusterResponse,
    ReconciliationErrorResponse,
    ReconciliationResponse,
)
from app.schemas.summary import SummaryResponse
from app.schemas.sync import SyncRunResponse, SyncStatsResponse

__all__ = [
    "DuplicateClusterResponse",
    "ReconciliationErrorResponse",
    "ReconciliationResponse",
    "SummaryResponse",
    "SyncRunResponse",
    "SyncStatsResponse",
]
