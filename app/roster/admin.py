from flask import Blueprint, render_template

from app.roster.accounts import list_accounts
from app.roster.db import db_session
from app.roster.rbac import require_admin, require_login

bp = Blueprint("admin", __name__)


# ============================================================================
# ACCOUNT MANAGEMENT (Admin Only)
# ============================================================================

@bp.get("/users")
@require_login
@require_admin
def users_list():
    s = db_session()
    users = list_accounts(s)
    return render_template("users/list.html", users=users)
