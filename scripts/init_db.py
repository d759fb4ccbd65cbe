"""
Create tables (development only) and run the idempotent bootstrap:
default admin/user accounts plus the one-time character import.

Usage:
  python scripts/init_db.py                 # seed only (tables must exist, e.g. after `alembic upgrade head`)
  python scripts/init_db.py --create-tables # also create tables directly from the models (SQLite dev setups)
"""
import argparse
import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.roster.bootstrap import BootstrapReport, run_bootstrap  # noqa: E402


def seed_only(*, database_url: str | None = None, create_tables: bool = False) -> BootstrapReport:
    """
    Seed default accounts and reference data. Does NOT overwrite existing accounts.
    """
    if database_url:
        os.environ["DATABASE_URL"] = database_url
    # The app factory would otherwise seed on its own before tables exist.
    os.environ["BOOTSTRAP_ON_START"] = "0"

    from app.roster import create_app
    from app.roster.db import close_db
    from app.roster.models import Base

    app = create_app()
    if create_tables:
        Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])
        print("Tables created (metadata.create_all).")

    try:
        report = run_bootstrap(app)
    finally:
        close_db(app)
    print("Initialized database (seed_only).")
    print(f"Accounts created: {', '.join(report.accounts_created) or '(none)'}")
    print(f"Characters imported: {report.characters_imported}")
    print(f"Emblems imported: {report.emblems_imported}")
    for err in report.errors:
        print(f"WARNING: {err}")
    return report


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the roster database.")
    parser.add_argument("--create-tables", action="store_true", help="Create tables from the models before seeding.")
    args = parser.parse_args()
    seed_only(database_url=None, create_tables=args.create_tables)


if __name__ == "__main__":
    main()
