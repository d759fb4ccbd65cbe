"""Tests for the characters listing, detail and admin edit routes."""
import pytest

from app.roster import create_app
from app.roster.bootstrap import run_bootstrap
from app.roster.db import session_scope
from app.roster.models import Base
from app.roster.modules.characters.service import get_character

CHARACTERS = [
    {
        "id": "c1",
        "name": "Alpha",
        "age": 30,
        "description": "Leads from the front.",
        "isActive": True,
        "rank": "Captain",
        "birthDate": "1990-04-01",
        "imageUrl": "https://example.com/alpha.png",
        "weapons": ["M4A1", "Knife"],
        "unit": {"id": "u1", "name": "Red", "emblemUrl": "", "motto": "First in", "isElite": True, "foundedYear": 1999},
    },
    {
        "id": "c2",
        "name": "Beta",
        "age": 25,
        "description": "Quiet.",
        "isActive": False,
        "rank": "Sergeant",
        "birthDate": "1995-09-12",
        "imageUrl": "",
        "weapons": [],
        "unit": {"id": "u2", "name": "Blue", "emblemUrl": "", "motto": "Last out", "isElite": False, "foundedYear": 2004},
    },
]


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("BOOTSTRAP_ON_START", "0")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])
    run_bootstrap(app, fetch_characters=lambda: CHARACTERS)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client, username, password):
    client.post("/login", data={"username": username, "password": password})


def _csrf(client) -> str:
    client.get("/characters")
    with client.session_transaction() as sess:
        return sess["csrf_token"]


def _edit_form(client, **overrides):
    data = {
        "csrf_token": _csrf(client),
        "name": "Alpha Prime",
        "age": "31",
        "description": "Promoted.",
        "isActive": "true",
    }
    data.update(overrides)
    return data


# ---------- List ----------
def test_list_search_is_case_insensitive(client):
    _login(client, "user", "user123")
    r = client.get("/characters?search=ALP")
    assert r.status_code == 200
    assert b"Alpha" in r.data
    assert b"Beta" not in r.data
    assert b"Showing 1 character" in r.data


def test_list_sort_desc(client):
    _login(client, "user", "user123")
    r = client.get("/characters?sort=name&order=desc")
    assert r.status_code == 200
    assert r.data.index(b">Beta<") < r.data.index(b">Alpha<")


def test_list_sort_by_unit_name(client):
    _login(client, "user", "user123")
    r = client.get("/characters?sort=unit&order=asc")
    # Blue (Beta) before Red (Alpha)
    assert r.data.index(b">Beta<") < r.data.index(b">Alpha<")


# ---------- Detail ----------
def test_detail_ok_and_not_found(client):
    _login(client, "user", "user123")
    r = client.get("/characters/c1")
    assert r.status_code == 200
    assert b"Leads from the front." in r.data
    assert b"M4A1, Knife" in r.data
    # Regular users don't get an edit link
    assert b"/characters/c1/edit" not in r.data

    r = client.get("/characters/nope")
    assert r.status_code == 404


def test_detail_requires_login(client):
    r = client.get("/characters/c1")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


# ---------- Edit ----------
def test_edit_page_forbidden_for_user(client):
    _login(client, "user", "user123")
    r = client.get("/characters/c1/edit")
    assert r.status_code == 403
    assert b"Access denied" in r.data


def test_edit_page_for_admin(client):
    _login(client, "admin", "admin123")
    r = client.get("/characters/c1/edit")
    assert r.status_code == 200
    assert b'name="isActive"' in r.data

    r = client.get("/characters/nope/edit")
    assert r.status_code == 404


def test_user_edit_post_is_forbidden_and_not_applied(app, client):
    _login(client, "user", "user123")
    r = client.post("/characters/c1/edit", data=_edit_form(client))
    assert r.status_code == 403

    with session_scope(app) as s:
        assert get_character(s, "c1").name == "Alpha"


def test_admin_edit_post_applies_update(app, client):
    _login(client, "admin", "admin123")
    r = client.post("/characters/c1/edit", data=_edit_form(client))
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/characters/c1")

    with session_scope(app) as s:
        c = get_character(s, "c1")
        assert c.name == "Alpha Prime"
        assert c.age == 31
        assert c.description == "Promoted."
        assert c.is_active is True
        # Non-editable fields untouched
        assert c.rank == "Captain"
        assert c.unit["name"] == "Red"


def test_admin_edit_unchecked_active_flag(app, client):
    _login(client, "admin", "admin123")
    data = _edit_form(client)
    data.pop("isActive")
    client.post("/characters/c1/edit", data=data)
    with session_scope(app) as s:
        assert get_character(s, "c1").is_active is False


def test_admin_edit_rejects_bad_age(app, client):
    _login(client, "admin", "admin123")
    r = client.post("/characters/c1/edit", data=_edit_form(client, age="old"))
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/characters/c1/edit")
    with session_scope(app) as s:
        assert get_character(s, "c1").age == 30


def test_anonymous_edit_post_redirects_to_login(app, client):
    r = client.post("/characters/c1/edit", data={"name": "X", "age": "1"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")
    with session_scope(app) as s:
        assert get_character(s, "c1").name == "Alpha"


def test_user_edit_post_without_token_is_forbidden(app, client):
    # Role check wins over the token check: a USER always gets 403.
    _login(client, "user", "user123")
    r = client.post("/characters/c1/edit", data={"name": "X", "age": "1"})
    assert r.status_code == 403
    with session_scope(app) as s:
        assert get_character(s, "c1").name == "Alpha"


def test_edit_post_without_csrf_token_is_rejected(app, client):
    _login(client, "admin", "admin123")
    data = _edit_form(client)
    data.pop("csrf_token")
    r = client.post("/characters/c1/edit", data=data)
    assert r.status_code == 400
    with session_scope(app) as s:
        assert get_character(s, "c1").name == "Alpha"


def test_edit_post_with_wrong_csrf_token_shows_reason(app, client):
    _login(client, "admin", "admin123")
    r = client.post("/characters/c1/edit", data=_edit_form(client, csrf_token="forged"))
    assert r.status_code == 400
    assert b"CSRF token missing or invalid." in r.data
