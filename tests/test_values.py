from conftest import login

from app.cad.db import session_scope
from app.cad.modules.values.models import Value


def test_search_is_case_insensitive_substring(client):
    login(client, "user")
    r = client.get("/admin/values/address/search", query_string={"query": "STREET"})
    assert r.status_code == 200
    assert [v["value"] for v in r.get_json()] == ["Alta Street", "Grove Street"]


def test_empty_query_returns_values_in_position_order(client):
    login(client, "user")
    r = client.get("/admin/values/address/search", query_string={"query": ""})
    assert [v["value"] for v in r.get_json()] == ["Alta Street", "Grove Street", "Vinewood Boulevard"]


def test_search_escapes_like_wildcards(client):
    login(client, "user")
    r = client.get("/admin/values/address/search", query_string={"query": "%"})
    assert r.get_json() == []


def test_search_skips_disabled_values(app, client):
    with session_scope(app) as s:
        s.query(Value).filter(Value.value == "Grove Street").one().is_disabled = True
    login(client, "user")
    r = client.get("/admin/values/address/search", query_string={"query": "street"})
    assert [v["value"] for v in r.get_json()] == ["Alta Street"]


def test_unknown_type_on_search_is_404(client):
    login(client, "user")
    r = client.get("/admin/values/spaceship/search", query_string={"query": "x"})
    assert r.status_code == 404
    assert r.get_json()["code"] == "value_type_not_found"


def test_list_by_types(client):
    login(client, "user")
    r = client.get("/admin/values", query_string={"types": "address,vehicle"})
    assert r.status_code == 200
    groups = {g["type"]: [v["value"] for v in g["values"]] for g in r.get_json()}
    assert groups == {
        "ADDRESS": ["Alta Street", "Grove Street", "Vinewood Boulevard"],
        "VEHICLE": ["Sultan RS"],
    }


def test_list_rejects_unknown_type(client):
    login(client, "user")
    r = client.get("/admin/values", query_string={"types": "address,spaceship"})
    assert r.status_code == 400
    assert "types" in r.get_json()["errors"]


def test_create_and_delete_value(client):
    login(client, "admin")
    r = client.post("/admin/values/address", json={"value": "Elysian Fields"})
    assert r.status_code == 200
    created = r.get_json()
    assert created["type"] == "ADDRESS"
    assert created["position"] == 4

    r = client.delete(f"/admin/values/address/{created['id']}")
    assert r.status_code == 200
    search = client.get("/admin/values/address/search", query_string={"query": "elysian"}).get_json()
    assert search == []


def test_create_value_forbidden_for_base_rank(app, client):
    login(client, "user")
    r = client.post("/admin/values/address", json={"value": "Elysian Fields"})
    assert r.status_code == 403
    with session_scope(app) as s:
        assert s.query(Value).filter(Value.value == "Elysian Fields").count() == 0


def test_delete_value_of_wrong_type_is_404(app, client):
    with session_scope(app) as s:
        sultan_id = s.query(Value).filter(Value.value == "Sultan RS").one().id
    login(client, "admin")
    assert client.delete(f"/admin/values/address/{sultan_id}").status_code == 404


def test_value_used_by_vehicle_cannot_be_deleted(app, client):
    with session_scope(app) as s:
        sultan_id = s.query(Value).filter(Value.value == "Sultan RS").one().id
    login(client, "admin")
    r = client.delete(f"/admin/values/vehicle/{sultan_id}")
    assert r.status_code == 409
    assert r.get_json()["code"] == "value_in_use"
    with session_scope(app) as s:
        assert s.get(Value, sultan_id) is not None
