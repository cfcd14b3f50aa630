"""
Append-only audit trail.

Every mutation in the CAD API (posts, settings, logos, features, values,
vehicle transfers, logins) records one `AuditEvent` in the same transaction
as the change itself, so a rolled-back change leaves no event behind.
"""
from __future__ import annotations

import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.cad.models import AuditEvent, User


def _request_fields() -> tuple[str | None, str | None]:
    if not has_request_context():
        return None, None
    return getattr(g, "request_id", None), request.remote_addr


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    rid, client_ip = _request_fields()
    ev = AuditEvent(
        request_id=request_id or rid,
        actor_user_id=actor.id if actor else None,
        actor_username=actor.username if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
        client_ip=client_ip,
    )
    s.add(ev)
    return ev


def events_for(s: Session, entity_type: str, entity_id: str | int) -> list[AuditEvent]:
    """Trail of one entity, oldest first."""
    return (
        s.query(AuditEvent)
        .filter(AuditEvent.entity_type == entity_type, AuditEvent.entity_id == str(entity_id))
        .order_by(AuditEvent.created_at.asc(), AuditEvent.id.asc())
        .all()
    )
