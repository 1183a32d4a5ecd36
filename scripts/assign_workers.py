#!/usr/bin/env python3
"""
Attach contract workers to a contractor.

Usage:
  python scripts/assign_workers.py --contractor 12                 # every unassigned worker
  python scripts/assign_workers.py --contractor 12 --worker 40 41  # specific workers

Reads the same settings as the API (SQLALCHEMY_DATABASE_URL, ENV_FILE).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend")))

from app.core.observability import setup_logging  # noqa: E402
from app.database import get_db_session  # noqa: E402
from app.services import bookings  # noqa: E402
from app.utils.errors import MarketplaceError  # noqa: E402

logger = logging.getLogger("scripts.assign_workers")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--contractor", type=int, required=True, help="contractor user id")
    parser.add_argument("--worker", type=int, nargs="*", default=[], help="worker user ids")
    args = parser.parse_args(argv)

    setup_logging()
    with get_db_session() as db:
        try:
            if args.worker:
                for worker_id in args.worker:
                    bookings.assign_contractor(db, worker_id, args.contractor)
                count = len(args.worker)
            else:
                count = bookings.assign_unassigned_workers(db, args.contractor)
        except MarketplaceError as exc:
            logger.error("Assignment failed: %s %s", exc.message, exc.field_errors)
            return 1
    print(f"Assigned {count} worker(s) to contractor {args.contractor}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
