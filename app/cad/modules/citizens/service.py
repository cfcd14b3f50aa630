from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func

from app.cad.modules.citizens.models import Citizen

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

CITIZEN_SEARCH_LIMIT = 25


def serialize_citizen(c: Citizen) -> dict[str, Any]:
    return {
        "id": c.id,
        "userId": c.user_id,
        "name": c.name,
        "surname": c.surname,
    }


def search_citizens(s: "Session", query: str, limit: int = CITIZEN_SEARCH_LIMIT) -> list[Citizen]:
    """Match every whitespace-separated term against name or surname."""
    q = s.query(Citizen)
    for term in (query or "").split():
        term = term.lower()
        q = q.filter(
            func.lower(Citizen.name).contains(term, autoescape=True)
            | func.lower(Citizen.surname).contains(term, autoescape=True)
        )
    return q.order_by(Citizen.name.asc(), Citizen.surname.asc(), Citizen.id.asc()).limit(limit).all()


def get_transfer_target(s: "Session", citizen_id: int) -> Citizen | None:
    """Citizens without a linked user cannot own vehicles."""
    c = s.get(Citizen, citizen_id)
    if c is None or c.user_id is None:
        return None
    return c
