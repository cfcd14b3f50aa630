"""
General settings tab of the admin client.

Submitting is two requests: the field values as JSON, then (only when a new
logo file is attached and the first request succeeded) the logo as
multipart. The logo id is merged into the first response before the shared
settings snapshot is patched. A failed logo upload leaves the saved fields
in place; there is no compensating request.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.cad.client.fetch import LOADING, FetchHook
from app.cad.client.forms import FormState, UploadFile, handle_validate, validate_file
from app.cad.client.session import ClientSession
from app.cad.client.state import Snapshot
from app.cad.constants import Feature
from app.cad.schemas import CAD_SETTINGS_SCHEMA

logger = logging.getLogger(__name__)

FIELD_ORDER = (
    "name",
    "image",
    "areaOfPlay",
    "registrationCode",
    "roleplayEnabled",
    "whitelisted",
    "towWhitelisted",
    "taxiWhitelisted",
    "businessWhitelisted",
)


def initial_values(cad: Mapping[str, Any]) -> dict[str, Any]:
    misc = cad.get("miscCadSettings") or {}
    roleplay_enabled = misc.get("roleplayEnabled")
    return {
        "name": cad.get("name") or "",
        "areaOfPlay": cad.get("areaOfPlay") or "",
        "steamApiKey": cad.get("steamApiKey") or "",
        "towWhitelisted": bool(cad.get("towWhitelisted") or False),
        "taxiWhitelisted": bool(cad.get("taxiWhitelisted") or False),
        "whitelisted": bool(cad.get("whitelisted") or False),
        "businessWhitelisted": bool(cad.get("businessWhitelisted") or False),
        "registrationCode": cad.get("registrationCode") or "",
        "roleplayEnabled": True if roleplay_enabled is None else bool(roleplay_enabled),
        "logoId": cad.get("logoId") or "",
    }


class GeneralSettingsForm:
    def __init__(self, session: ClientSession) -> None:
        self.session = session
        self.fetch = FetchHook(session)
        self.logo: UploadFile | str | None = None

        cad = session.cad.get()
        self.form: FormState | None = None
        if cad is not None:
            self.form = FormState(initial_values(cad), validate=handle_validate(CAD_SETTINGS_SCHEMA))
            self.logo = cad.get("logoId") or None

    @property
    def is_loading(self) -> bool:
        return self.fetch.state == LOADING

    @property
    def visible_fields(self) -> list[str]:
        """areaOfPlay is only rendered while the AOP feature is on; its value is always submitted."""
        aop = self.session.is_feature_enabled(Feature.AOP.value)
        return [f for f in FIELD_ORDER if f != "areaOfPlay" or aop]

    def set_logo(self, image: UploadFile | str | None) -> None:
        self.logo = image

    def unmount(self) -> None:
        self.fetch.unmount()

    def submit(self) -> Snapshot | None:
        if self.form is None:
            return None
        return self.form.submit(self._on_submit)

    def _on_submit(self, values: dict[str, Any], helpers: FormState) -> Snapshot | None:
        if self.session.cad.get() is None:
            return None

        validated_image = validate_file(self.logo, helpers)

        result = self.fetch.execute("/admin/settings", "PUT", data=values, helpers=helpers)
        json = dict(result.json or {})
        if not json.get("id"):
            return None

        upload_failed = False
        if isinstance(validated_image, UploadFile):
            logo_result = self.fetch.execute(
                "/admin/settings/image",
                "POST",
                files={"image": validated_image.as_request_file()},
                helpers=helpers,
            )
            logo_id = (logo_result.json or {}).get("logoId") if logo_result.ok else None
            if logo_id:
                json["logoId"] = logo_id
                self.logo = logo_id
                # the next PUT must carry the new id, or the server unlinks it
                helpers.values["logoId"] = logo_id
                helpers.initial_values["logoId"] = logo_id
            else:
                upload_failed = True
                logger.warning("Settings saved but logo upload failed: %s", logo_result.error)

        snapshot = self.session.cad.patch(json)
        if not upload_failed:
            self.session.notifier.success("Successfully saved settings.")
        return snapshot
