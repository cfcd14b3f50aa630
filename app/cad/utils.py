from __future__ import annotations

from datetime import datetime
from typing import Any

from app.cad.models import User

# Only these user columns ever leave the server attached to other entities.
USER_PROPERTIES = ("id", "username", "rank")


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def user_projection(user: User | None) -> dict[str, Any] | None:
    """Restricted view of a user for embedding as author/owner."""
    if user is None:
        return None
    return {key: getattr(user, key) for key in USER_PROPERTIES}


def parse_id(raw: Any) -> int | None:
    """Parse a path/body identifier; returns None when it cannot be an id."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None
