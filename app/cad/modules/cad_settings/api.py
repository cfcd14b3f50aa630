from __future__ import annotations

import mimetypes

from flask import Blueprint, current_app, jsonify, request, send_file
from sqlalchemy.exc import SQLAlchemyError

from app.cad.constants import Feature
from app.cad.db import db_session
from app.cad.errors import NotFoundError, ValidationError
from app.cad.modules.cad_settings.service import (
    get_or_create_settings,
    logo_storage_key,
    serialize_settings,
    set_feature,
    update_settings,
    upload_logo,
    validate_logo,
)
from app.cad.rbac import CAD_SETTINGS_RULE, authorize, current_user, is_allowed, require_auth
from app.cad.schemas import CAD_SETTINGS_SCHEMA, FEATURE_SCHEMA, validate_schema
from app.cad.storage import storage_from_config

bp = Blueprint("cad_settings", __name__)


@bp.get("/settings")
@require_auth
def settings_get():
    s = db_session()
    cad = get_or_create_settings(s)
    s.commit()
    return jsonify(serialize_settings(s, cad, include_secrets=is_allowed(current_user(), CAD_SETTINGS_RULE)))


@bp.put("/settings")
@require_auth
def settings_update():
    s = db_session()
    u = current_user()

    data = validate_schema(CAD_SETTINGS_SCHEMA, request.get_json(silent=True))
    authorize(u, CAD_SETTINGS_RULE)

    cad = get_or_create_settings(s)
    update_settings(s, cad, data, u)
    s.commit()
    return jsonify(serialize_settings(s, cad, include_secrets=True))


@bp.post("/settings/image")
@require_auth
def settings_image_upload():
    s = db_session()
    u = current_user()
    authorize(u, CAD_SETTINGS_RULE)

    f = request.files.get("image")
    if f is None:
        raise ValidationError({"image": "No image was provided."})
    file_bytes = f.read()
    ext = validate_logo(f.filename, f.mimetype, len(file_bytes), current_app.config["LOGO_MAX_BYTES"])

    cad = get_or_create_settings(s)
    storage = storage_from_config(current_app.config)
    logo_id, previous = upload_logo(s, cad, storage, file_bytes, f.mimetype, ext, u)
    try:
        s.commit()
    except SQLAlchemyError:
        storage.delete(logo_storage_key(logo_id))
        raise

    if previous and previous != logo_id:
        storage.delete(logo_storage_key(previous))
    return jsonify({"logoId": logo_id})


@bp.get("/settings/image/<logo_id>")
def settings_image_get(logo_id: str):
    s = db_session()
    cad = get_or_create_settings(s)
    if not cad.logo_id or cad.logo_id != logo_id:
        raise NotFoundError("Logo not found", code="logo_not_found")
    storage = storage_from_config(current_app.config)
    key = logo_storage_key(logo_id)
    if not storage.exists(key):
        raise NotFoundError("Logo not found", code="logo_not_found")
    mimetype = mimetypes.guess_type(logo_id)[0] or "application/octet-stream"
    return send_file(storage.open(key), mimetype=mimetype, download_name=logo_id)


@bp.put("/settings/features")
@require_auth
def settings_features_update():
    s = db_session()
    u = current_user()

    data = validate_schema(FEATURE_SCHEMA, request.get_json(silent=True))
    try:
        feature = Feature(data["feature"].upper())
    except ValueError:
        raise ValidationError({"feature": "Unknown feature."}) from None
    authorize(u, CAD_SETTINGS_RULE)

    cad = get_or_create_settings(s)
    set_feature(s, cad, feature, data["isEnabled"], u)
    s.commit()
    return jsonify(serialize_settings(s, cad, include_secrets=True)["features"])
