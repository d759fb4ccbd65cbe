from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for

from app.roster.db import db_session
from app.roster.modules.characters.service import (
    RosterQuery,
    get_character,
    list_characters,
    parse_character_edit,
    query_roster,
    update_character,
)
from app.roster.rbac import require_admin, require_login
from app.roster.security import require_csrf

bp = Blueprint("characters", __name__)


# ---------- List ----------
@bp.get("/characters")
@require_login
def characters_list():
    s = db_session()
    q = RosterQuery.from_args(request.args)

    characters = query_roster(list_characters(s), search=q.search, sort=q.sort, order=q.order)

    return render_template(
        "characters/list.html",
        characters=characters,
        search=q.search,
        sort_field=q.sort,
        sort_order=q.order,
    )


# ---------- Detail ----------
@bp.get("/characters/<character_id>")
@require_login
def character_detail(character_id: str):
    s = db_session()
    character = get_character(s, character_id)
    if not character:
        abort(404)
    return render_template("characters/detail.html", character=character)


# ---------- Edit ----------
@bp.get("/characters/<character_id>/edit")
@require_login
@require_admin
def character_edit_get(character_id: str):
    s = db_session()
    character = get_character(s, character_id)
    if not character:
        abort(404)
    return render_template("characters/edit.html", character=character)


@bp.post("/characters/<character_id>/edit")
@require_login
@require_admin
@require_csrf
def character_edit_post(character_id: str):
    s = db_session()
    character = get_character(s, character_id)
    if not character:
        abort(404)

    payload, errors = parse_character_edit(request.form)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("characters.character_edit_get", character_id=character_id))

    update_character(s, character, payload)
    s.commit()
    current_app.logger.info("Character %s updated", character_id)

    flash("Character updated.", "success")
    return redirect(url_for("characters.character_detail", character_id=character_id))
