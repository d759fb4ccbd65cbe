from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g, redirect, url_for

from app.roster.auth import SessionUser
from app.roster.models import Role


def user_has_role(user: SessionUser | None, role: Role) -> bool:
    if not user:
        return False
    return user.role == role


def require_login(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        # Anonymous → redirect to login, never an error body.
        if not getattr(g, "current_user", None):
            return redirect(url_for("auth.login_get"))
        return fn(*args, **kwargs)

    return wrapped


def require_admin(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Stack below @require_login. Authenticated but not an admin → 403.
    """

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        user: SessionUser | None = getattr(g, "current_user", None)
        if not user_has_role(user, Role.ADMIN):
            g.forbidden_reason = "admin role required"
            abort(403)
        return fn(*args, **kwargs)

    return wrapped
