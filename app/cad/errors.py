"""
Application error types and their JSON rendering.

Handlers raise these; `register_error_handlers` turns them into
`{"code": ..., "detail": ...}` responses with the matching status code.
"""
from __future__ import annotations

import logging
from typing import Any

from flask import Flask, g, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from app.cad.db import rollback_db_session

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error. Subclass to define domain-specific errors."""

    status_code: int = 400
    default_code: str = "error"
    default_detail: str = "An error occurred."

    def __init__(self, detail: str | None = None, code: str | None = None) -> None:
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        super().__init__(self.detail)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "detail": self.detail}


class ValidationError(AppError):
    status_code = 400
    default_code = "validation_error"
    default_detail = "Validation failed."

    def __init__(self, errors: dict[str, str], detail: str | None = None) -> None:
        super().__init__(detail)
        self.errors = dict(errors)

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["errors"] = self.errors
        return d


class UnauthorizedError(AppError):
    status_code = 401
    default_code = "unauthorized"
    default_detail = "Authentication required."


class ForbiddenError(AppError):
    status_code = 403
    default_code = "forbidden"
    default_detail = "You do not have permission to perform this action."

    def __init__(self, missing: tuple[str, ...] = (), detail: str | None = None) -> None:
        super().__init__(detail)
        self.missing = tuple(missing)


class NotFoundError(AppError):
    status_code = 404
    default_code = "not_found"
    default_detail = "The requested resource was not found."


class ConflictError(AppError):
    status_code = 409
    default_code = "conflict"
    default_detail = "The resource is in use."


class FeatureDisabledError(NotFoundError):
    default_code = "feature_disabled"
    default_detail = "This feature is disabled."


class InternalError(AppError):
    status_code = 500
    default_code = "internal_error"
    default_detail = "An internal error occurred."


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def _app_error(e: AppError):  # type: ignore[no-redef]
        rid = getattr(g, "request_id", None)
        if isinstance(e, ForbiddenError):
            logger.warning("Forbidden: missing_permission=%s request_id=%s", ",".join(e.missing) or "-", rid)
        elif isinstance(e, InternalError):
            logger.error("Internal error (request_id=%s): %s", rid, e.detail)
        else:
            logger.info("%s (request_id=%s): %s", e.code, rid, e.detail)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def _db_error(e: SQLAlchemyError):  # type: ignore[no-redef]
        rollback_db_session()
        logger.exception("Database error (request_id=%s)", getattr(g, "request_id", None))
        err = InternalError()
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):  # type: ignore[no-redef]
        code = (e.name or "error").lower().replace(" ", "_")
        return jsonify({"code": code, "detail": e.description}), e.code or 500

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        err = InternalError()
        return jsonify(err.to_dict()), err.status_code
