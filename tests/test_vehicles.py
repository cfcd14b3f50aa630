from conftest import login, user_id

from app.cad.audit import events_for
from app.cad.db import session_scope
from app.cad.modules.citizens.models import Citizen
from app.cad.modules.vehicles.models import RegisteredVehicle


def _citizen_id(app, name: str) -> int:
    with session_scope(app) as s:
        return s.query(Citizen).filter(Citizen.name == name).one().id


def _vehicle(app, plate: str = "ABC123") -> RegisteredVehicle:
    with session_scope(app) as s:
        v = s.query(RegisteredVehicle).filter(RegisteredVehicle.plate == plate).one()
        s.expunge(v)
        return v


def test_list_only_own_vehicles(client):
    login(client, "user")
    r = client.get("/vehicles")
    assert r.status_code == 200
    vehicles = r.get_json()
    assert [v["plate"] for v in vehicles] == ["ABC123"]
    assert vehicles[0]["model"]["value"]["value"] == "Sultan RS"
    assert vehicles[0]["citizen"]["name"] == "Jane"

    client.post("/auth/logout")
    login(client, "other")
    assert client.get("/vehicles").get_json() == []


def test_transfer_to_other_citizen(app, client):
    login(client, "user")
    vehicle = _vehicle(app)
    john = _citizen_id(app, "John")

    r = client.post(f"/vehicles/transfer/{vehicle.id}", json={"ownerId": str(john), "name": "John Smith"})
    assert r.status_code == 200, r.get_json()
    body = r.get_json()
    assert body["citizenId"] == john
    assert body["userId"] == user_id(app, "other")
    assert body["citizen"]["surname"] == "Smith"

    moved = _vehicle(app)
    assert moved.citizen_id == john
    assert moved.user_id == user_id(app, "other")
    with session_scope(app) as s:
        assert [e.action for e in events_for(s, "RegisteredVehicle", vehicle.id)] == ["vehicle.transfer"]
    assert client.get("/vehicles").get_json() == []


def test_transfer_requires_ownership(app, client):
    login(client, "other")
    vehicle = _vehicle(app)
    r = client.post(f"/vehicles/transfer/{vehicle.id}", json={"ownerId": _citizen_id(app, "John"), "name": "John Smith"})
    assert r.status_code == 404
    assert r.get_json()["code"] == "vehicle_not_found"
    assert _vehicle(app).user_id == user_id(app, "user")


def test_transfer_unknown_vehicle(client):
    login(client, "user")
    r = client.post("/vehicles/transfer/999", json={"ownerId": "1", "name": "Jane Doe"})
    assert r.status_code == 404


def test_transfer_to_unknown_or_unlinked_citizen(app, client):
    login(client, "user")
    vehicle = _vehicle(app)

    r = client.post(f"/vehicles/transfer/{vehicle.id}", json={"ownerId": "999", "name": "Nobody"})
    assert r.status_code == 404
    assert r.get_json()["code"] == "new_owner_not_found"

    npc = _citizen_id(app, "Npc")
    r = client.post(f"/vehicles/transfer/{vehicle.id}", json={"ownerId": npc, "name": "Npc Walker"})
    assert r.status_code == 404
    assert _vehicle(app).citizen_id == _citizen_id(app, "Jane")


def test_transfer_validation(app, client):
    login(client, "user")
    vehicle = _vehicle(app)

    r = client.post(f"/vehicles/transfer/{vehicle.id}", json={"ownerId": "", "name": ""})
    assert r.status_code == 400
    assert set(r.get_json()["errors"]) == {"ownerId", "name"}

    r = client.post(f"/vehicles/transfer/{vehicle.id}", json={"ownerId": "abc", "name": "John Smith"})
    assert r.status_code == 400
    assert "ownerId" in r.get_json()["errors"]


def test_citizen_search(client):
    login(client, "user")
    r = client.get("/citizens/search", query_string={"query": "jo sm"})
    assert r.status_code == 200
    assert [(c["name"], c["surname"]) for c in r.get_json()] == [("John", "Smith")]

    everyone = client.get("/citizens/search").get_json()
    assert len(everyone) == 3
