"""
app/domain package marker.
"""

from app.domain.inspections import (
    Coordinates,
    EstablishmentBatch,
    ParsedViolation,
    SourceInspection,
    SourceInspectionRecord,
    SyncRunOutcome,
    SyncStats,
)
from app.domain.reconciliation import DuplicateCluster, ReconciliationFailure, ReconciliationReport
from app.domain.summaries import CacheDecision, SummaryCacheState, SummaryResult

__all__ = [
    "CacheDecision",
    "Coordinates",
    "DuplicateCluster",
    "EstablishmentBatch",
    "ParsedViolation",
    "ReconciliationFailure",
    "ReconciliationReport",
    "SourceInspection",
    "SourceInspectionRecord",
    "SummaryCacheState",
    "SummaryResult",
    "SyncRunOutcome",
    "SyncStats",
]
