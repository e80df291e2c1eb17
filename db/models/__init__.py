"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.establishment import Establishment
from db.models.inspection import Inspection, InspectionResult
from db.models.sync_run import SyncRun, SyncRunMode, SyncRunStatus
from db.models.violation import Violation

__all__ = [
    "Establishment",
    "Inspection",
    "InspectionResult",
    "SyncRun",
    "SyncRunMode",
    "SyncRunStatus",
    "Violation",
]
