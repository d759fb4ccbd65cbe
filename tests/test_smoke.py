import pytest

from app.roster import create_app
from app.roster.bootstrap import run_bootstrap
from app.roster.models import Base

CHARACTERS = [
    {"id": "c1", "name": "Alpha", "age": 30, "isActive": True, "unit": {"id": "u1", "name": "Red"}},
    {"id": "c2", "name": "Beta", "age": 25, "isActive": False, "unit": {"id": "u2", "name": "Blue"}},
]


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("BOOTSTRAP_ON_START", "0")

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    run_bootstrap(app, fetch_characters=lambda: CHARACTERS)

    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True

    r = client.get("/healthz")
    assert r.status_code == 200


def test_root_redirects_to_characters(client):
    r = client.get("/")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/characters")


def test_anonymous_redirected_then_allowed_after_login(client):
    # Anonymous → diverted to the login page
    r = client.get("/characters")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")

    r = client.post("/login", data={"username": "user", "password": "user123"}, follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/characters")

    r = client.get("/characters")
    assert r.status_code == 200
    assert b"Alpha" in r.data
    assert b"Beta" in r.data


def test_logout_destroys_session(client):
    client.post("/login", data={"username": "user", "password": "user123"})
    assert client.get("/characters").status_code == 200

    r = client.post("/logout")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")

    r = client.get("/characters")
    assert r.status_code == 302


def test_logout_without_session_still_redirects(client):
    r = client.post("/logout")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


def test_session_cookie_is_rolling_and_not_secure_by_default(client):
    app = client.application
    assert app.config["SESSION_COOKIE_SECURE"] is False
    assert app.config["SESSION_REFRESH_EACH_REQUEST"] is True
    assert app.permanent_session_lifetime.total_seconds() == 24 * 60 * 60


def test_close_db_disposes_engine_once(client):
    from app.roster.db import close_db

    app = client.application
    assert "sqlalchemy_engine" in app.extensions
    close_db(app)
    assert "sqlalchemy_engine" not in app.extensions
    assert "sqlalchemy_sessionmaker" not in app.extensions
    close_db(app)
