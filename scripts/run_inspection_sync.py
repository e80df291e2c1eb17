"""
Run one inspection sync from the CLI.

Exit status is 1 when the run failed outright, 0 for completed or partial.
"""

from __future__ import annotations

import argparse
import json

from app.logging_utils import configure_logging
from app.services.inspection_sync_service import get_inspection_sync_service
from db.models.sync_run import SyncRunStatus
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync city food inspections into the store.")
    parser.add_argument(
        "--full-rebuild",
        dest="full_rebuild",
        action="store_true",
        help="Re-read the full lookback window instead of the incremental watermark.",
    )
    args = parser.parse_args()
    configure_logging()

    with session_scope() as db:
        outcome = get_inspection_sync_service().run(db=db, full_rebuild=args.full_rebuild)

    payload = {
        "run_id": str(outcome.run_id),
        "mode": outcome.mode,
        "status": outcome.status,
        "since_date": outcome.since_date.isoformat(),
        "stats": outcome.stats.as_dict(),
    }
    print(json.dumps(payload, indent=2))
    return 1 if outcome.status == SyncRunStatus.FAILED else 0


if __name__ == "__main__":
    raise SystemExit(main())
