from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.cad.audit import record_event
from app.cad.errors import NotFoundError, ValidationError
from app.cad.modules.citizens.service import get_transfer_target, serialize_citizen
from app.cad.modules.values.service import serialize_value
from app.cad.modules.vehicles.models import RegisteredVehicle
from app.cad.utils import isoformat, parse_id

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cad.models import User


def serialize_vehicle(v: RegisteredVehicle) -> dict[str, Any]:
    return {
        "id": v.id,
        "plate": v.plate,
        "color": v.color,
        "modelId": v.model_id,
        "model": {"id": v.model_id, "value": serialize_value(v.model)},
        "citizenId": v.citizen_id,
        "citizen": serialize_citizen(v.citizen),
        "userId": v.user_id,
        "createdAt": isoformat(v.created_at),
        "updatedAt": isoformat(v.updated_at),
    }


def list_user_vehicles(s: "Session", user: "User") -> list[RegisteredVehicle]:
    return (
        s.query(RegisteredVehicle)
        .filter(RegisteredVehicle.user_id == user.id)
        .order_by(RegisteredVehicle.created_at.desc(), RegisteredVehicle.id.desc())
        .all()
    )


def get_owned_vehicle(s: "Session", vehicle_id: int, user: "User") -> RegisteredVehicle | None:
    v = s.get(RegisteredVehicle, vehicle_id)
    if v is None or v.user_id != user.id:
        return None
    return v


def transfer_vehicle(s: "Session", vehicle_id: int, data: dict, user: "User") -> RegisteredVehicle:
    """
    Reassign a vehicle the actor owns to another citizen.
    Both the vehicle and the new owner are resolved before anything changes.
    """
    vehicle = get_owned_vehicle(s, vehicle_id, user)
    if vehicle is None:
        raise NotFoundError("Vehicle not found", code="vehicle_not_found")

    owner_id = parse_id(data["ownerId"])
    if owner_id is None:
        raise ValidationError({"ownerId": "Invalid owner."})
    new_owner = get_transfer_target(s, owner_id)
    if new_owner is None:
        raise NotFoundError("New owner not found", code="new_owner_not_found")

    previous = {"citizen_id": vehicle.citizen_id, "user_id": vehicle.user_id}
    vehicle.citizen_id = new_owner.id
    vehicle.citizen = new_owner
    vehicle.user_id = new_owner.user_id
    vehicle.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=user,
        action="vehicle.transfer",
        entity_type="RegisteredVehicle",
        entity_id=str(vehicle.id),
        metadata={
            "plate": vehicle.plate,
            "from": previous,
            "to": {"citizen_id": new_owner.id, "user_id": new_owner.user_id, "name": data["name"]},
        },
    )
    return vehicle
