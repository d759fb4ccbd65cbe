"""
Release step: bring the schema to head, then run the startup seeding once.

Usage:
  DATABASE_URL=postgresql+psycopg://... python scripts/release.py
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.roster.bootstrap import BootstrapReport  # noqa: E402


def upgrade_schema(database_url: str) -> None:
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(cfg, "head")


def run_release(database_url: str | None = None) -> BootstrapReport:
    database_url = (database_url or os.environ.get("DATABASE_URL") or "").strip()
    if not database_url:
        raise RuntimeError("DATABASE_URL is required for a release.")

    print("Migrating schema to head...", flush=True)
    upgrade_schema(database_url)

    from scripts.init_db import seed_only

    return seed_only(database_url=database_url)


if __name__ == "__main__":
    run_release()
