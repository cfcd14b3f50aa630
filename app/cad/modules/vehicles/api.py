from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.cad.db import db_session
from app.cad.modules.vehicles.service import list_user_vehicles, serialize_vehicle, transfer_vehicle
from app.cad.rbac import current_user, require_auth
from app.cad.schemas import TRANSFER_VEHICLE_SCHEMA, validate_schema

bp = Blueprint("vehicles", __name__)


@bp.get("/vehicles")
@require_auth
def vehicles_list():
    vehicles = list_user_vehicles(db_session(), current_user())
    return jsonify([serialize_vehicle(v) for v in vehicles])


@bp.post("/vehicles/transfer/<int:vehicle_id>")
@require_auth
def vehicles_transfer(vehicle_id: int):
    s = db_session()
    u = current_user()

    data = validate_schema(TRANSFER_VEHICLE_SCHEMA, request.get_json(silent=True))
    vehicle = transfer_vehicle(s, vehicle_id, data, u)
    s.commit()
    return jsonify(serialize_vehicle(vehicle))
