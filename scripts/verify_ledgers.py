#!/usr/bin/env python3
"""
Check every wallet against its transaction history.

Usage:
  python scripts/verify_ledgers.py

Exits non-zero when any account's stored balance differs from the
balance_after of its latest completed transaction.
"""
from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend")))

from app.core.observability import setup_logging  # noqa: E402
from app.database import get_db_session  # noqa: E402
from app.models import User  # noqa: E402
from app.services import ledger  # noqa: E402


def main() -> int:
    setup_logging()
    drifted = []
    with get_db_session() as db:
        account_ids = [row.id for row in db.query(User.id).order_by(User.id).all()]
        for account_id in account_ids:
            if not ledger.verify_account_ledger(db, account_id):
                drifted.append(account_id)
    print(f"Checked {len(account_ids)} accounts; {len(drifted)} drifted.")
    for account_id in drifted:
        print(f"  account {account_id}")
    return 1 if drifted else 0


if __name__ == "__main__":
    sys.exit(main())
