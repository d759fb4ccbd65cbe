import hmac
import secrets
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Request, abort, request, session

CSRF_FAILED_MESSAGE = "CSRF token missing or invalid."


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate the CSRF token from the form or the X-CSRF-Token header."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    expected = session.get("csrf_token")
    return bool(token and expected and hmac.compare_digest(str(token), str(expected)))


def require_csrf(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Stack below @require_login/@require_admin so the guards decide first:
    anonymous → login redirect, non-admin → 403, then a bad token → 400.
    """

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        if not validate_csrf(request):
            abort(400, description=CSRF_FAILED_MESSAGE)
        return fn(*args, **kwargs)

    return wrapped
