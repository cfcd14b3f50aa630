from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.cad.constants import ValueType
from app.cad.db import db_session
from app.cad.errors import NotFoundError, ValidationError
from app.cad.modules.values.service import (
    create_value,
    delete_value,
    get_value,
    list_values,
    search_values,
    serialize_value,
)
from app.cad.rbac import VALUES_RULE, authorize, current_user, require_auth
from app.cad.schemas import VALUE_SCHEMA, validate_schema

bp = Blueprint("values", __name__)


def _value_type_or_404(raw: str) -> ValueType:
    vt = ValueType.from_path(raw)
    if vt is None:
        raise NotFoundError(f"Unknown value type: {raw}", code="value_type_not_found")
    return vt


@bp.get("/values")
@require_auth
def values_list():
    raw_types = [t for t in (request.args.get("types") or "").split(",") if t.strip()]
    if raw_types:
        types = []
        for raw in raw_types:
            vt = ValueType.from_path(raw)
            if vt is None:
                raise ValidationError({"types": f"Unknown value type: {raw.strip()}"})
            types.append(vt)
    else:
        types = list(ValueType)
    return jsonify(list_values(db_session(), types))


@bp.get("/values/<value_type>/search")
@require_auth
def values_search(value_type: str):
    vt = _value_type_or_404(value_type)
    query = request.args.get("query") or ""
    values = search_values(db_session(), vt, query)
    return jsonify([serialize_value(v) for v in values])


@bp.post("/values/<value_type>")
@require_auth
def values_create(value_type: str):
    s = db_session()
    u = current_user()
    vt = _value_type_or_404(value_type)

    data = validate_schema(VALUE_SCHEMA, request.get_json(silent=True))
    authorize(u, VALUES_RULE)

    v = create_value(s, vt, data, u)
    s.commit()
    return jsonify(serialize_value(v))


@bp.delete("/values/<value_type>/<int:value_id>")
@require_auth
def values_delete(value_type: str, value_id: int):
    s = db_session()
    u = current_user()
    vt = _value_type_or_404(value_type)

    v = get_value(s, vt, value_id)
    if v is None:
        raise NotFoundError("Value not found", code="value_not_found")
    authorize(u, VALUES_RULE)

    delete_value(s, v, u)
    s.commit()
    return jsonify(True)
