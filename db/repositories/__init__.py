"""
Repository layer exports.
"""

from db.repositories.errors import EstablishmentNotFoundError, RepositoryError
from db.repositories.establishment_repository import EstablishmentRepository
from db.repositories.inspection_repository import InspectionIdentity, InspectionRepository
from db.repositories.sync_run_repository import SyncRunRepository
from db.repositories.upsert import dialect_insert

__all__ = [
    "EstablishmentRepository",
    "InspectionRepository",
    "InspectionIdentity",
    "SyncRunRepository",
    "dialect_insert",
    "RepositoryError",
    "EstablishmentNotFoundError",
]
