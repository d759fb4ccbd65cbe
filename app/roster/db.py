"""
Storage context for one app: engine and session factory live in
``app.extensions`` and are created by ``init_db`` and released by ``close_db``.
"""
from __future__ import annotations

import atexit
from contextlib import contextmanager
from collections.abc import Iterator
from typing import Any

from flask import Flask, current_app, g
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ENGINE_KEY = "sqlalchemy_engine"
SESSIONMAKER_KEY = "sqlalchemy_sessionmaker"


def engine_options(config: dict[str, Any]) -> dict[str, Any]:
    """Pool tuning only applies to server databases; SQLite keeps SQLAlchemy's defaults."""
    options: dict[str, Any] = {"pool_pre_ping": True}
    if not str(config["DATABASE_URL"]).startswith("sqlite"):
        options["pool_size"] = config["DB_POOL_SIZE"]
        options["max_overflow"] = config["DB_MAX_OVERFLOW"]
        options["pool_recycle"] = config["DB_POOL_RECYCLE_SECONDS"]
    return options


def init_db(app: Flask) -> None:
    engine = create_engine(app.config["DATABASE_URL"], **engine_options(app.config))
    app.extensions[ENGINE_KEY] = engine
    app.extensions[SESSIONMAKER_KEY] = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    atexit.register(close_db, app)
    app.logger.debug("Storage context ready (%s)", engine.url.render_as_string(hide_password=True))


def close_db(app: Flask) -> None:
    """
    Dispose the engine and forget the session factory. Safe to call more than once.
    """
    engine = app.extensions.pop(ENGINE_KEY, None)
    app.extensions.pop(SESSIONMAKER_KEY, None)
    if engine is not None:
        engine.dispose()


def db_session(app: Flask | None = None) -> Session:
    """Request-scoped session, closed by teardown_db_session."""
    if "db_session" not in g:
        g.db_session = (app or current_app).extensions[SESSIONMAKER_KEY]()
    return g.db_session


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = g.pop("db_session", None)
    if s is not None:
        s.close()


@contextmanager
def session_scope(app: Flask) -> Iterator[Session]:
    """Unit of work outside a request: commit on success, roll back on error."""
    s: Session = app.extensions[SESSIONMAKER_KEY]()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
