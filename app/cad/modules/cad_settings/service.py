from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.cad.audit import record_event
from app.cad.constants import ALLOWED_IMAGE_TYPES, Feature
from app.cad.errors import ValidationError
from app.cad.features import feature_map
from app.cad.modules.cad_settings.models import CadFeature, CadSettings
from app.cad.utils import isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cad.models import User
    from app.cad.storage import Storage


LOGO_KEY_PREFIX = "cad/logos"


def get_or_create_settings(s: "Session") -> CadSettings:
    cad = s.query(CadSettings).order_by(CadSettings.id.asc()).first()
    if cad is None:
        cad = CadSettings()
        s.add(cad)
        s.flush()
    return cad


def serialize_settings(s: "Session", cad: CadSettings, *, include_secrets: bool) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": cad.id,
        "name": cad.name,
        "areaOfPlay": cad.area_of_play,
        "logoId": cad.logo_id,
        "whitelisted": cad.whitelisted,
        "towWhitelisted": cad.tow_whitelisted,
        "taxiWhitelisted": cad.taxi_whitelisted,
        "businessWhitelisted": cad.business_whitelisted,
        "miscCadSettings": {"roleplayEnabled": cad.roleplay_enabled},
        "features": feature_map(s),
        "updatedAt": isoformat(cad.updated_at),
    }
    if include_secrets:
        data["steamApiKey"] = cad.steam_api_key
        data["registrationCode"] = cad.registration_code
    return data


def update_settings(s: "Session", cad: CadSettings, data: dict, user: "User") -> CadSettings:
    """Wholesale replacement of the general settings. `data` is schema-validated."""
    changed = []
    for attr, key in (
        ("name", "name"),
        ("area_of_play", "areaOfPlay"),
        ("steam_api_key", "steamApiKey"),
        ("registration_code", "registrationCode"),
        ("whitelisted", "whitelisted"),
        ("tow_whitelisted", "towWhitelisted"),
        ("taxi_whitelisted", "taxiWhitelisted"),
        ("business_whitelisted", "businessWhitelisted"),
        ("roleplay_enabled", "roleplayEnabled"),
    ):
        new = data.get(key)
        if getattr(cad, attr) != new:
            changed.append(key)
        setattr(cad, attr, new)

    # logoId may only be cleared from here; new logos go through the upload endpoint.
    if not data.get("logoId") and cad.logo_id:
        changed.append("logoId")
        cad.logo_id = None

    cad.updated_at = datetime.utcnow()
    cad.updated_by_user_id = user.id

    record_event(
        s,
        actor=user,
        action="cad_settings.edit",
        entity_type="CadSettings",
        entity_id=str(cad.id),
        # secret values are never written to the audit trail
        metadata={"changed": changed},
    )
    return cad


def validate_logo(filename: str | None, content_type: str | None, size_bytes: int, max_bytes: int) -> str:
    """Returns the file extension to store under, or raises ValidationError."""
    if not filename:
        raise ValidationError({"image": "No image was provided."})
    ext = ALLOWED_IMAGE_TYPES.get((content_type or "").split(";")[0].strip().lower())
    if not ext:
        raise ValidationError({"image": "Image must be a PNG, JPEG, GIF or WebP file."})
    if size_bytes <= 0:
        raise ValidationError({"image": "Image is empty."})
    if size_bytes > max_bytes:
        raise ValidationError({"image": f"Image is too large (max {max_bytes // 1024} KB)."})
    return ext


def logo_storage_key(logo_id: str) -> str:
    return f"{LOGO_KEY_PREFIX}/{logo_id}"


def upload_logo(
    s: "Session",
    cad: CadSettings,
    storage: "Storage",
    file_bytes: bytes,
    content_type: str,
    ext: str,
    user: "User",
) -> tuple[str, str | None]:
    """
    Stores the new logo and points the settings at it. Returns the new id and
    the replaced one; the caller deletes the replaced file once the commit lands.
    """
    logo_id = f"{uuid.uuid4().hex}{ext}"
    storage.put_bytes(logo_storage_key(logo_id), file_bytes, content_type=content_type)

    previous = cad.logo_id
    cad.logo_id = logo_id
    cad.updated_at = datetime.utcnow()
    cad.updated_by_user_id = user.id

    record_event(
        s,
        actor=user,
        action="cad_settings.logo_upload",
        entity_type="CadSettings",
        entity_id=str(cad.id),
        metadata={"logo_id": logo_id, "previous_logo_id": previous, "size_bytes": len(file_bytes)},
    )
    return logo_id, previous


def set_feature(s: "Session", cad: CadSettings, feature: Feature, is_enabled: bool, user: "User") -> CadFeature:
    row = s.query(CadFeature).filter(CadFeature.feature == feature.value).one_or_none()
    if row is None:
        row = CadFeature(cad_id=cad.id, feature=feature.value, is_enabled=is_enabled)
        s.add(row)
    else:
        row.is_enabled = is_enabled
    s.flush()

    record_event(
        s,
        actor=user,
        action="cad_settings.feature_toggle",
        entity_type="CadFeature",
        entity_id=feature.value,
        metadata={"is_enabled": is_enabled},
    )
    return row
