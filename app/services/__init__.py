"""
app/services package marker.
"""

from app.services.duplicate_reconciler_service import DuplicateInspectionReconciler
from app.services.inspection_sync_service import InspectionSyncService, get_inspection_sync_service
from app.services.summary_cache_service import SummaryCacheService, get_summary_cache_service

__all__ = [
    "DuplicateInspectionReconciler",
    "InspectionSyncService",
    "get_inspection_sync_service",
    "SummaryCacheService",
    "get_summary_cache_service",
]
