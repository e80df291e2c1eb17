"""
app/services/duplicate_reconciler_service.py

Offline repair of inspection rows stored under different spellings of the
same source identifier.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.reconciliation import DuplicateCluster, ReconciliationFailure, ReconciliationReport
from app.logging_utils import log_event
from app.parsing.source_records import normalize_inspection_id
from db.repositories.establishment_repository import EstablishmentRepository
from db.repositories.inspection_repository import InspectionIdentity, InspectionRepository
from scoring.calculator import summarize_history

logger = logging.getLogger(__name__)


def build_duplicate_clusters(identities: Sequence[InspectionIdentity]) -> list[DuplicateCluster]:
    """
    Group inspections by normalized identifier and keep the earliest-created
    member of each group with more than one row.

    ``identities`` are expected oldest first; the sort below is stable so
    equal creation times keep that order.
    """

    groups: dict[str, list[InspectionIdentity]] = {}
    for identity in identities:
        groups.setdefault(normalize_inspection_id(identity.inspection_id), []).append(identity)

    clusters: list[DuplicateCluster] = []
    for identifier, members in groups.items():
        if len(members) < 2:
            continue
        ordered = sorted(members, key=lambda member: member.created_at)
        kept = ordered[0]
        clusters.append(
            DuplicateCluster(
                identifier=identifier,
                kept_id=kept.id,
                kept_inspection_id=kept.inspection_id,
                deleted_ids=tuple(member.id for member in ordered[1:]),
            )
        )
    return clusters


class DuplicateInspectionReconciler:
    """
    Finds and, when asked, removes duplicate inspection rows.

    Each cluster is repaired in its own transaction; a failing cluster is
    reported and the pass moves on.
    """

    def find_duplicate_clusters(self, db: Session) -> list[DuplicateCluster]:
        return build_duplicate_clusters(InspectionRepository(db).list_identities())

    def reconcile(self, db: Session, *, execute: bool = False) -> ReconciliationReport:
        clusters = self.find_duplicate_clusters(db)
        report = ReconciliationReport(dry_run=not execute, clusters=clusters)

        log_event(
            logger,
            logging.INFO,
            "inspection_reconcile_started",
            dry_run=report.dry_run,
            clusters=len(clusters),
            rows_to_delete=report.rows_to_delete,
        )
        if not execute:
            return report

        repository = InspectionRepository(db)
        establishments = EstablishmentRepository(db)
        for cluster in clusters:
            try:
                affected = repository.establishment_ids_for((cluster.kept_id, *cluster.deleted_ids))
                deleted = repository.delete_inspections(cluster.deleted_ids)
                if cluster.kept_inspection_id != cluster.identifier:
                    repository.set_inspection_identifier(cluster.kept_id, cluster.identifier)
                # Score and history follow the remaining inspection set.
                for establishment_id in affected:
                    establishments.update_derived(
                        establishment_id,
                        summarize_history(repository.outcomes_for_establishment(establishment_id)),
                    )
                db.commit()
            except Exception as exc:  # noqa: BLE001
                db.rollback()
                report.errors.append(ReconciliationFailure(identifier=cluster.identifier, error=str(exc)))
                logger.error(
                    "Failed to reconcile inspection cluster identifier=%s error=%s",
                    cluster.identifier,
                    exc,
                )
                continue
            report.rows_deleted += deleted

        log_event(
            logger,
            logging.INFO if not report.errors else logging.WARNING,
            "inspection_reconcile_finished",
            rows_deleted=report.rows_deleted,
            errors=len(report.errors),
        )
        return report
