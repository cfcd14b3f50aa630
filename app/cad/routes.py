from flask import Blueprint, jsonify
from sqlalchemy import text

from app.cad.db import db_session

bp = Blueprint("routes", __name__)


@bp.get("/health")
def health():
    """Readiness: the app is up and the database answers."""
    db_session().execute(text("SELECT 1"))
    return jsonify({"ok": True, "database": "ok"})


@bp.get("/healthz")
def healthz():
    # liveness probe; never touches the database
    return "ok", 200
