# src/deiwy/scripts/migrate.py
from __future__ import annotations

import argparse
import os

from alembic import command
from alembic.config import Config

from deiwy.core.settings import settings

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), "..", "..", "..")


def _alembic_config() -> Config:
    cfg = Config(os.path.join(PROJECT_ROOT, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    cfg.set_main_option("script_location", os.path.abspath(os.path.join(PROJECT_ROOT, "migrations")))
    return cfg


def run_upgrade(revision: str = "head") -> None:
    command.upgrade(_alembic_config(), revision)


def run_downgrade(revision: str) -> None:
    command.downgrade(_alembic_config(), revision)


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database migrations")
    parser.add_argument("revision", nargs="?", default="head", help="Target revision (default: head)")
    parser.add_argument("--down", action="store_true", help="Downgrade to the revision instead")
    args = parser.parse_args()

    if args.down:
        run_downgrade(args.revision)
    else:
        run_upgrade(args.revision)


if __name__ == "__main__":
    main()
