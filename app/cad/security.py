"""
Session-bound CSRF tokens for the JSON API.

The token is handed out by /auth/login and /auth/me and must come back on every
mutating request in the `X-CSRF-Token` header (multipart uploads may send it
as a `csrf_token` form field instead).
"""
from __future__ import annotations

import secrets

from flask import Flask, Request, request, session

from app.cad.errors import AppError

CSRF_HEADER = "X-CSRF-Token"
CSRF_FORM_FIELD = "csrf_token"
CSRF_SESSION_KEY = "csrf_token"

UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
# login/logout establish or drop the session the token lives in
EXEMPT_BLUEPRINTS = frozenset({"auth"})
PUBLIC_PREFIXES = ("/static/", "/health", "/healthz")


class CsrfError(AppError):
    status_code = 400
    default_code = "csrf_invalid"
    default_detail = "CSRF token missing or invalid."


def ensure_csrf_token() -> str:
    token = session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[CSRF_SESSION_KEY] = token
    return token


def rotate_csrf_token() -> str:
    """New token for a new login; the previous one stops working."""
    session[CSRF_SESSION_KEY] = secrets.token_urlsafe(32)
    return session[CSRF_SESSION_KEY]


def submitted_token(req: Request) -> str | None:
    token = req.headers.get(CSRF_HEADER)
    if not token and req.mimetype in ("multipart/form-data", "application/x-www-form-urlencoded"):
        token = req.form.get(CSRF_FORM_FIELD)
    return token or None


def validate_csrf(req: Request) -> bool:
    token = submitted_token(req)
    expected = session.get(CSRF_SESSION_KEY) or ""
    return bool(token and expected and secrets.compare_digest(token, expected))


def init_csrf(app: Flask) -> None:
    @app.before_request
    def _csrf_guard():
        if request.path.startswith(PUBLIC_PREFIXES):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method not in UNSAFE_METHODS or request.blueprint in EXEMPT_BLUEPRINTS:
            return None
        if not validate_csrf(request):
            raise CsrfError()
        return None
