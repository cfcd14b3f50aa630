from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request, session
from werkzeug.security import check_password_hash

from app.cad.audit import record_event
from app.cad.db import db_session
from app.cad.errors import AppError, UnauthorizedError
from app.cad.models import User
from app.cad.rbac import require_auth
from app.cad.security import ensure_csrf_token, rotate_csrf_token

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds


class TooManyAttemptsError(AppError):
    status_code = 429
    default_code = "too_many_attempts"
    default_detail = "Too many login attempts. Please wait 5 minutes."


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def _user_payload(user: User) -> dict:
    permissions = sorted(user.permission_keys)
    return {
        "id": user.id,
        "username": user.username,
        "rank": user.rank,
        "permissions": permissions,
    }


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if request.path.startswith(("/static/", "/health", "/healthz")):
        g.current_user = None
        return

    user_id = session.get("user_id")
    if not user_id:
        g.current_user = None
        return

    s = db_session()
    user = s.get(User, int(user_id))
    if not user or not user.is_active:
        session.pop("user_id", None)
        g.current_user = None
        return
    g.current_user = user


@bp.post("/login")
def login_post():
    body = request.get_json(silent=True) or {}
    username = str(body.get("username") or "").strip()
    password = str(body.get("password") or "")
    ip = request.remote_addr or "unknown"

    if _check_rate_limit(ip):
        raise TooManyAttemptsError()

    _record_attempt(ip)

    s = db_session()
    user = s.query(User).filter(User.username == username).one_or_none()
    if not user or not user.is_active or not check_password_hash(user.password_hash, password):
        record_event(
            s,
            actor=None,
            action="auth.login_failed",
            entity_type="User",
            entity_id=username,
            reason="Invalid credentials",
            metadata={"username": username},
        )
        s.commit()
        raise UnauthorizedError("Invalid credentials.", code="invalid_credentials")

    session.clear()
    session["user_id"] = user.id
    _login_attempts[ip].clear()
    record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=str(user.id))
    s.commit()
    current_app.logger.info("User %s logged in (request_id=%s)", user.id, getattr(g, "request_id", None))
    return jsonify({"user": _user_payload(user), "csrfToken": rotate_csrf_token()})


@bp.post("/logout")
def logout():
    s = db_session()
    user = getattr(g, "current_user", None)
    if user:
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=str(user.id))
        s.commit()
    session.clear()
    return jsonify(True)


@bp.get("/me")
@require_auth
def me():
    return jsonify({"user": _user_payload(g.current_user), "csrfToken": ensure_csrf_token()})
