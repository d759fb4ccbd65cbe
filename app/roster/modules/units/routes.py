from __future__ import annotations

from flask import Blueprint, abort, render_template

from app.roster.db import db_session
from app.roster.modules.characters.service import list_characters
from app.roster.modules.units.service import aggregate_units, unit_detail
from app.roster.rbac import require_login

bp = Blueprint("units", __name__)


@bp.get("/units")
@require_login
def units_list():
    s = db_session()
    units = aggregate_units(list_characters(s))
    return render_template("units/list.html", units=units)


@bp.get("/units/<unit_id>")
@require_login
def unit_detail_view(unit_id: str):
    s = db_session()
    detail = unit_detail(s, unit_id)
    if detail is None:
        abort(404)
    return render_template("units/detail.html", unit=detail.unit, members=detail.members, enriched=detail.enriched)
