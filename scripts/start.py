#!/usr/bin/env python3
"""
Container entrypoint: release, then replace this process with gunicorn.

Env: PORT (default 3000), WEB_CONCURRENCY (workers, default 2).
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

DEFAULT_PORT = 3000


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    return int(raw) if raw else default


def gunicorn_argv(port: int, workers: int) -> list[str]:
    # Views are synchronous; threads give each worker concurrent requests.
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", str(workers),
        "--threads", "4",
        "--preload",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    try:
        port = _env_int("PORT", DEFAULT_PORT)
        workers = _env_int("WEB_CONCURRENCY", 2)
    except ValueError as e:
        sys.exit(f"Invalid PORT or WEB_CONCURRENCY: {e}")
    if not 1 <= port <= 65535:
        sys.exit(f"PORT out of range: {port}")

    from scripts.release import run_release

    run_release()

    # Seeding already happened in the release step.
    os.environ["BOOTSTRAP_ON_START"] = "0"
    os.execvp("gunicorn", gunicorn_argv(port, workers))


if __name__ == "__main__":
    main()
