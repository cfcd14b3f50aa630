from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.cad.db import db_session
from app.cad.modules.citizens.service import search_citizens, serialize_citizen
from app.cad.rbac import require_auth

bp = Blueprint("citizens", __name__)


@bp.get("/citizens/search")
@require_auth
def citizens_search():
    citizens = search_citizens(db_session(), request.args.get("query") or "")
    return jsonify([serialize_citizen(c) for c in citizens])
