import logging
import os
from datetime import timedelta

from flask import Flask, g, render_template, request, session
from dotenv import load_dotenv

from app.roster.config import load_config
from app.roster.db import init_db, teardown_db_session
from app.roster.routes import bp as routes_bp
from app.roster.auth import bp as auth_bp, load_current_user
from app.roster.admin import bp as admin_bp
from app.roster.modules.characters.routes import bp as characters_bp
from app.roster.modules.units.routes import bp as units_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=app.config["SESSION_LIFETIME_HOURS"])
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    # CSRF protection (minimal); validation itself is the @require_csrf decorator.
    from app.roster.security import ensure_csrf_token

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_user() -> dict:
        return {"current_user": getattr(g, "current_user", None)}

    # Identity first, so route guards see g.current_user.
    app.before_request(load_current_user)

    @app.before_request
    def _session_housekeeping():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        # Rolling expiry: every request pushes the cookie lifetime out again.
        session.permanent = True
        return None

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if not app.config.get("SESSION_COOKIE_SECURE"):
            app.logger.warning("SESSION_COOKIE_SECURE is off in production; session cookies will travel over plain HTTP.")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(characters_bp)
    app.register_blueprint(units_bp)

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(400)
    def _err_400(e):  # type: ignore[no-redef]
        app.logger.info("Bad request: path=%s reason=%s request_id=%s", request.path, e.description, getattr(g, "request_id", None))
        return render_template("errors/400.html", message=e.description), 400

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    @app.errorhandler(403)
    def _err_403(e):  # type: ignore[no-redef]
        user = getattr(g, "current_user", None)
        app.logger.warning(
            "Forbidden: user=%s reason=%s path=%s request_id=%s",
            user.username if user else None,
            getattr(g, "forbidden_reason", None),
            request.path,
            getattr(g, "request_id", None),
        )
        return render_template("errors/403.html", message="Access denied. Admins only."), 403

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    if app.config.get("BOOTSTRAP_ON_START"):
        from app.roster.bootstrap import run_bootstrap

        run_bootstrap(app)

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
