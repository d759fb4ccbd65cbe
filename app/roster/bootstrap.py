"""
Startup seeding: default accounts and reference data.

Safe to run on every start. Existing accounts are never modified and a table
that already holds rows is never re-imported. Failures are logged and
swallowed so the dashboard still comes up (possibly with an empty roster).
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from flask import Flask

from app.roster.accounts import ensure_account
from app.roster.db import session_scope
from app.roster.models import Role
from app.roster.modules.characters.service import count_characters, import_characters
from app.roster.modules.characters.source import JsonSourceClient
from app.roster.modules.units.service import count_emblems, import_emblems

logger = logging.getLogger(__name__)

Fetcher = Callable[[], list[dict[str, Any]]]


@dataclass
class BootstrapReport:
    accounts_created: list[str] = field(default_factory=list)
    characters_imported: int = 0
    emblems_imported: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _default_accounts(app: Flask) -> list[tuple[str, str, Role]]:
    return [
        ("admin", app.config.get("ADMIN_PASSWORD") or "admin123", Role.ADMIN),
        ("user", app.config.get("USER_PASSWORD") or "user123", Role.USER),
    ]


def _source_fetcher(app: Flask, url: str) -> Fetcher:
    client = JsonSourceClient(url=url, timeout_seconds=int(app.config.get("SOURCE_TIMEOUT_SECONDS") or 30))
    return client.fetch_records


def seed_accounts(app: Flask, report: BootstrapReport) -> None:
    for username, password, role in _default_accounts(app):
        try:
            with session_scope(app) as s:
                if ensure_account(s, username, password, role):
                    report.accounts_created.append(username)
                    logger.info("Bootstrap: created default %s account '%s'", role.value, username)
        except Exception as e:
            logger.exception("Bootstrap: could not ensure account '%s'", username)
            report.errors.append(f"account {username}: {e}")


def _table_is_empty(app: Flask, count: Callable[[Any], int]) -> bool:
    with session_scope(app) as s:
        return count(s) == 0


def seed_characters(app: Flask, report: BootstrapReport, fetch: Fetcher | None = None) -> None:
    try:
        if not _table_is_empty(app, count_characters):
            logger.info("Bootstrap: characters already present; skipping import")
            return
        url = app.config.get("CHARACTERS_SOURCE_URL") or ""
        logger.info("Bootstrap: character table empty; fetching %s", url or "(injected source)")
        # No transaction is open while the source is fetched.
        records = (fetch or _source_fetcher(app, url))()
        with session_scope(app) as s:
            if count_characters(s) > 0:
                logger.info("Bootstrap: characters imported concurrently; discarding fetched records")
                return
            report.characters_imported = import_characters(s, records)
        logger.info("Bootstrap: imported %d characters", report.characters_imported)
    except Exception as e:
        report.characters_imported = 0
        logger.exception("Bootstrap: character import failed")
        report.errors.append(f"characters: {e}")


def seed_emblems(app: Flask, report: BootstrapReport, fetch: Fetcher | None = None) -> None:
    url = app.config.get("EMBLEMS_SOURCE_URL") or ""
    if fetch is None and not url:
        return
    try:
        if not _table_is_empty(app, count_emblems):
            return
        records = (fetch or _source_fetcher(app, url))()
        with session_scope(app) as s:
            if count_emblems(s) > 0:
                return
            report.emblems_imported = import_emblems(s, records)
    except Exception as e:
        report.emblems_imported = 0
        logger.exception("Bootstrap: emblem import failed")
        report.errors.append(f"emblems: {e}")


def run_bootstrap(
    app: Flask,
    *,
    fetch_characters: Fetcher | None = None,
    fetch_emblems: Fetcher | None = None,
) -> BootstrapReport:
    report = BootstrapReport()
    seed_accounts(app, report)
    seed_characters(app, report, fetch_characters)
    seed_emblems(app, report, fetch_emblems)
    if report.errors:
        logger.warning("Bootstrap finished with %d error(s); serving anyway", len(report.errors))
    return report
