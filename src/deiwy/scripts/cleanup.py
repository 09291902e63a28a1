"""Periodic housekeeping: expired sessions and abandoned sign-ups."""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from deiwy.db.session import SessionLocal
from deiwy.services.session_store import SessionStore
from deiwy.services.user_service import delete_unverified_users

logger = logging.getLogger(__name__)


def run_cleanup(unverified_after_days: int = 3) -> tuple[int, int]:
    """Return ``(sessions_removed, users_removed)``."""
    db = SessionLocal()
    try:
        sessions_removed = SessionStore(db).purge_expired()
        users_removed = delete_unverified_users(db, older_than_days=unverified_after_days)
    finally:
        db.close()
    return sessions_removed, users_removed


def main() -> None:
    parser = argparse.ArgumentParser(description="Remove expired sessions and stale unverified accounts")
    parser.add_argument(
        "--unverified-after-days",
        type=int,
        default=3,
        help="Delete never-verified accounts older than this many days (default: 3)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    try:
        sessions_removed, users_removed = run_cleanup(args.unverified_after_days)
    except SQLAlchemyError as exc:
        print(f"[cleanup] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"[cleanup] removed {sessions_removed} sessions and {users_removed} unverified accounts")


if __name__ == "__main__":
    main()
