"""
app/domain/reconciliation.py

Domain models for the duplicate inspection repair pass.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DuplicateCluster:
    """
    Inspection rows sharing one normalized identifier.

    ``kept_id`` is the earliest-created row; ``deleted_ids`` are the rest in
    creation order.
    """

    identifier: str
    kept_id: uuid.UUID
    kept_inspection_id: str
    deleted_ids: tuple[uuid.UUID, ...]

    @property
    def size(self) -> int:
        return 1 + len(self.deleted_ids)


@dataclass(frozen=True)
class ReconciliationFailure:
    identifier: str
    error: str


@dataclass
class ReconciliationReport:
    dry_run: bool
    clusters: list[DuplicateCluster] = field(default_factory=list)
    rows_deleted: int = 0
    errors: list[ReconciliationFailure] = field(default_factory=list)

    @property
    def total_duplicate_rows(self) -> int:
        return sum(cluster.size for cluster in self.clusters)

    @property
    def rows_to_delete(self) -> int:
        return sum(len(cluster.deleted_ids) for cluster in self.clusters)
