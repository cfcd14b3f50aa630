from conftest import FakeResponse, FlaskTransport, ScriptedTransport

from app.cad.client.session import ClientSession
from app.cad.client.transfer_vehicle import TRANSFER_VEHICLE_MODAL, TransferVehicleModal

VEHICLE = {"id": 7, "plate": "ABC123", "model": {"id": 4, "value": {"id": 4, "value": "Sultan RS"}}, "color": "Red"}


def test_modal_labels():
    session = ClientSession("http://cad.test", http=ScriptedTransport([]))
    modal = TransferVehicleModal(session, VEHICLE)
    assert modal.plate == "ABC123"
    assert modal.model == "Sultan RS"
    assert "Sultan RS" in modal.info
    assert not modal.can_submit

    modal.open()
    assert modal.is_open
    assert session.modals.payload(TRANSFER_VEHICLE_MODAL) == VEHICLE


def test_submit_without_owner_is_blocked():
    session = ClientSession("http://cad.test", http=ScriptedTransport([]))
    modal = TransferVehicleModal(session, VEHICLE)
    modal.owner_field.type_text("Unknown Person")
    assert modal.submit() is None
    assert "ownerId" in modal.form.errors
    assert session.http.calls == []


def test_server_not_found_becomes_toast():
    session = ClientSession(
        "http://cad.test",
        http=ScriptedTransport([FakeResponse(404, {"code": "new_owner_not_found", "detail": "New owner not found"})]),
    )
    modal = TransferVehicleModal(session, VEHICLE)
    modal.open()
    modal.owner_field.select({"id": 99, "name": "Ghost", "surname": "Rider"})

    assert modal.submit() is None
    assert modal.is_open
    assert session.notifier.last.message == "New owner not found"


def test_transfer_against_app(client):
    session = ClientSession("http://cad.test", http=FlaskTransport(client))
    assert session.login("user", "pw")
    vehicle = client.get("/vehicles").get_json()[0]

    transferred = []
    modal = TransferVehicleModal(session, vehicle, on_transfer=transferred.append)
    modal.open()
    john = modal.owner_field.fetch_options("smith")[0]
    modal.owner_field.select(john)
    assert modal.can_submit

    result = modal.submit()
    assert result["citizenId"] == john["id"]
    assert result["plate"] == "ABC123"
    assert transferred == [result]
    assert not modal.is_open
    assert client.get("/vehicles").get_json() == []
