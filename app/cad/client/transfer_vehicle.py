from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from app.cad.client.fetch import LOADING, FetchHook
from app.cad.client.forms import FormState, handle_validate
from app.cad.client.session import ClientSession
from app.cad.client.value_select import CitizenSuggestionsField, get_value_str
from app.cad.schemas import TRANSFER_VEHICLE_SCHEMA

TRANSFER_VEHICLE_MODAL = "transferVehicle"


class TransferVehicleModal:
    def __init__(
        self,
        session: ClientSession,
        vehicle: Mapping[str, Any],
        on_transfer: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self.session = session
        self.vehicle = dict(vehicle)
        self.on_transfer = on_transfer
        self.fetch = FetchHook(session)
        self.form = FormState({"ownerId": "", "name": ""}, validate=handle_validate(TRANSFER_VEHICLE_SCHEMA))
        self.owner_field = CitizenSuggestionsField(
            session,
            self.form,
            label="Owner",
            value_field_name="ownerId",
            label_field_name="name",
        )

    @property
    def plate(self) -> str:
        return str(self.vehicle.get("plate") or "")

    @property
    def model(self) -> str:
        return get_value_str(self.vehicle.get("model") or {})

    @property
    def info(self) -> str:
        return f"Transfer your {self.model} to a new owner. You will lose access to this vehicle."

    @property
    def is_open(self) -> bool:
        return self.session.modals.is_open(TRANSFER_VEHICLE_MODAL)

    @property
    def can_submit(self) -> bool:
        return self.form.is_valid and self.fetch.state != LOADING

    def open(self) -> None:
        self.session.modals.open_modal(TRANSFER_VEHICLE_MODAL, self.vehicle)

    def close(self) -> None:
        self.session.modals.close_modal(TRANSFER_VEHICLE_MODAL)

    def submit(self) -> dict[str, Any] | None:
        return self.form.submit(self._on_submit)

    def _on_submit(self, values: dict[str, Any], helpers: FormState) -> dict[str, Any] | None:
        result = self.fetch.execute(
            f"/vehicles/transfer/{self.vehicle['id']}",
            "POST",
            data=values,
            helpers=helpers,
        )
        json = result.json or {}
        if not json.get("id"):
            return None

        transferred = {**self.vehicle, **json}
        if self.on_transfer:
            self.on_transfer(transferred)
        self.close()
        return transferred
