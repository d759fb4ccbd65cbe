from __future__ import annotations

import uuid
from dataclasses import dataclass

from flask import Blueprint, current_app, g, redirect, render_template, request, session, url_for

from app.roster.accounts import UsernameTaken, authenticate, create_account
from app.roster.db import db_session
from app.roster.models import Role

bp = Blueprint("auth", __name__)

LOGIN_FAILED_MESSAGE = "Invalid username or password."


@dataclass(frozen=True)
class SessionUser:
    """The identity triple kept in the signed session cookie."""

    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _session_user_from_cookie() -> SessionUser | None:
    user_id = session.get("user_id")
    username = session.get("username")
    role = session.get("role")
    if not user_id or not username:
        return None
    try:
        return SessionUser(id=int(user_id), username=str(username), role=Role(role))
    except (TypeError, ValueError):
        return None


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a simple per-request request_id (for log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if request.path.startswith(("/static/", "/health", "/healthz")):
        g.current_user = None
        return

    user = _session_user_from_cookie()
    if user is None and session.get("user_id"):
        current_app.logger.warning("Discarding malformed session (request_id=%s)", g.request_id)
        session.clear()
    g.current_user = user


@bp.get("/login")
def login_get():
    if getattr(g, "current_user", None):
        return redirect(url_for("characters.characters_list"))
    return render_template("auth/login.html", error=None)


@bp.post("/login")
def login_post():
    username = request.form.get("username") or ""
    password = request.form.get("password") or ""

    try:
        s = db_session()
        user = authenticate(s, username, password)
    except Exception:
        current_app.logger.exception("Login POST crashed (username=%s request_id=%s)", username, getattr(g, "request_id", None))
        raise

    if user is None:
        current_app.logger.info("auth.login_failed username=%s", username)
        return render_template("auth/login.html", error=LOGIN_FAILED_MESSAGE, username=username)

    session.clear()
    session["user_id"] = user.id
    session["username"] = user.username
    session["role"] = user.role.value
    session.permanent = True
    current_app.logger.info("auth.login username=%s role=%s", user.username, user.role.value)
    return redirect(url_for("characters.characters_list"))


@bp.get("/register")
def register_get():
    if getattr(g, "current_user", None):
        return redirect(url_for("characters.characters_list"))
    return render_template("auth/register.html", error=None)


@bp.post("/register")
def register_post():
    username = request.form.get("username") or ""
    password = request.form.get("password") or ""

    # Stored exactly as typed; a name of only whitespace counts as missing.
    if not username.strip() or not password:
        return render_template("auth/register.html", error="Username and password are required.", username=username)

    s = db_session()
    try:
        # Self-registration is always a regular user, whatever the form says.
        create_account(s, username, password, role=Role.USER)
        s.commit()
    except UsernameTaken:
        return render_template("auth/register.html", error="Username already taken.", username=username)

    return redirect(url_for("auth.login_get"))


@bp.post("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        current_app.logger.info("auth.logout username=%s", user.username)
    session.clear()
    return redirect(url_for("auth.login_get"))
