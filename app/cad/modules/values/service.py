from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func

from app.cad.audit import record_event
from app.cad.constants import VALUE_SEARCH_LIMIT, ValueType
from app.cad.errors import ConflictError
from app.cad.modules.values.models import Value
from app.cad.utils import isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from app.cad.models import User


def serialize_value(v: Value) -> dict[str, Any]:
    return {
        "id": v.id,
        "type": v.type,
        "value": v.value,
        "isDefault": v.is_default,
        "isDisabled": v.is_disabled,
        "position": v.position,
        "createdAt": isoformat(v.created_at),
    }


def _ordered(q: "Query") -> "Query":
    # NULL positions sort last on every backend
    return q.order_by(Value.position.is_(None), Value.position.asc(), Value.value.asc(), Value.id.asc())


def list_values(s: "Session", value_types: list[ValueType]) -> list[dict[str, Any]]:
    grouped = []
    for vt in value_types:
        rows = _ordered(s.query(Value).filter(Value.type == vt.value)).all()
        grouped.append({"type": vt.value, "values": [serialize_value(v) for v in rows]})
    return grouped


def search_values(s: "Session", value_type: ValueType, query: str, limit: int = VALUE_SEARCH_LIMIT) -> list[Value]:
    """Case-insensitive substring search; an empty query returns the first `limit` values."""
    q = s.query(Value).filter(Value.type == value_type.value, Value.is_disabled.is_(False))
    query = (query or "").strip()
    if query:
        q = q.filter(func.lower(Value.value).contains(query.lower(), autoescape=True))
    return _ordered(q).limit(limit).all()


def get_value(s: "Session", value_type: ValueType, value_id: int) -> Value | None:
    v = s.get(Value, value_id)
    if v is None or v.type != value_type.value:
        return None
    return v


def create_value(s: "Session", value_type: ValueType, data: dict, user: "User") -> Value:
    last_position = s.query(func.max(Value.position)).filter(Value.type == value_type.value).scalar()
    v = Value(
        type=value_type.value,
        value=data["value"],
        position=(last_position or 0) + 1,
    )
    s.add(v)
    s.flush()

    record_event(
        s,
        actor=user,
        action="value.create",
        entity_type="Value",
        entity_id=str(v.id),
        metadata={"type": v.type, "value": v.value},
    )
    return v


def value_in_use(s: "Session", v: Value) -> bool:
    from app.cad.modules.vehicles.models import RegisteredVehicle

    return s.query(RegisteredVehicle.id).filter(RegisteredVehicle.model_id == v.id).first() is not None


def delete_value(s: "Session", v: Value, user: "User") -> None:
    if value_in_use(s, v):
        raise ConflictError(f"{v.value} is still used by registered vehicles.", code="value_in_use")
    record_event(
        s,
        actor=user,
        action="value.delete",
        entity_type="Value",
        entity_id=str(v.id),
        metadata={"type": v.type, "value": v.value},
    )
    s.delete(v)
