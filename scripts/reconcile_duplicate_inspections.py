"""
Find and optionally delete duplicate inspection rows from the CLI.

Dry run by default; pass --execute to delete. Exit status is 1 when any
cluster failed to reconcile.
"""

from __future__ import annotations

import argparse

from app.api.routers.maintenance_router import to_reconciliation_response
from app.logging_utils import configure_logging
from app.services.duplicate_reconciler_service import DuplicateInspectionReconciler
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Reconcile duplicate inspection rows.")
    parser.add_argument(
        "--execute",
        dest="execute",
        action="store_true",
        help="Delete redundant rows. Without this flag only a report is printed.",
    )
    args = parser.parse_args()
    configure_logging()

    with session_scope() as db:
        report = DuplicateInspectionReconciler().reconcile(db, execute=args.execute)

    print(to_reconciliation_response(report).model_dump_json(indent=2))
    return 1 if report.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
