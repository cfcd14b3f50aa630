import pytest
from conftest import FakeResponse, FlaskTransport, ScriptedTransport

from app.cad.client.forms import FormState
from app.cad.client.session import ClientSession
from app.cad.client.value_select import AsyncSelectField, CitizenSuggestionsField, ValueSelectField, get_value_str
from app.cad.constants import ValueType

ADDRESSES = [
    {"id": 1, "type": "ADDRESS", "value": "Alta Street"},
    {"id": 2, "type": "ADDRESS", "value": "Grove Street"},
]


def _session(*responses) -> ClientSession:
    return ClientSession("http://cad.test", http=ScriptedTransport(responses))


def _address_field(session, form, **kwargs) -> ValueSelectField:
    return ValueSelectField(session, form, "address", ValueType.ADDRESS, "Address", **kwargs)


def test_get_value_str_handles_nested_values():
    assert get_value_str({"value": "Alta Street"}) == "Alta Street"
    assert get_value_str({"id": 3, "value": {"value": "Sultan RS"}}) == "Sultan RS"
    assert get_value_str({}) == ""


def test_base_select_field_is_abstract():
    with pytest.raises(TypeError):
        AsyncSelectField(_session(), FormState({"x": None}), "x", "X")


def test_addresses_loaded_once_for_many_fields():
    session = _session(FakeResponse(200, [{"type": "ADDRESS", "values": ADDRESSES}]))
    form = FormState({"address": 2, "postal": None})

    first = _address_field(session, form)
    second = ValueSelectField(session, form, "postal", ValueType.ADDRESS, "Postal")

    assert len(session.http.calls) == 1
    assert first.search == "Grove Street"
    assert second.search == ""


def test_select_commits_id_and_shows_label():
    session = _session(FakeResponse(200, [{"type": "ADDRESS", "values": ADDRESSES}]))
    form = FormState({"address": None})
    picked = []
    field = _address_field(session, form, on_selection_change=picked.append)

    field.select(ADDRESSES[0])
    assert form.values["address"] == 1
    assert field.search == "Alta Street"
    assert picked == [ADDRESSES[0]]


def test_closing_menu_keeps_selection():
    session = _session(FakeResponse(200, [{"type": "ADDRESS", "values": ADDRESSES}]))
    form = FormState({"address": None})
    picked = []
    field = _address_field(session, form, on_selection_change=picked.append)

    field.select(ADDRESSES[1])
    field.close_menu()
    assert form.values["address"] == 2
    assert field.search == "Grove Street"
    assert len(picked) == 1


def test_typed_text_clears_committed_value():
    session = _session(FakeResponse(200, [{"type": "ADDRESS", "values": ADDRESSES}]))
    form = FormState({"address": 1})
    field = _address_field(session, form)

    field.type_text("Gro")
    assert field.search == "Gro"
    assert form.values["address"] is None


def test_clear_only_when_clearable():
    session = _session(FakeResponse(200, [{"type": "ADDRESS", "values": ADDRESSES}]))
    form = FormState({"address": 1})

    _address_field(session, form).clear()
    assert form.values["address"] == 1

    _address_field(session, form, is_clearable=True).clear()
    assert form.values["address"] is None


def test_value_search_against_app(client):
    session = ClientSession("http://cad.test", http=FlaskTransport(client))
    assert session.login("user", "pw")
    form = FormState({"address": None})
    field = _address_field(session, form, filter_fn=lambda item, i: item["value"] != "Grove Street")

    assert [v["value"] for v in session.values.get(ValueType.ADDRESS)] == [
        "Alta Street",
        "Grove Street",
        "Vinewood Boulevard",
    ]
    options = field.fetch_options("street")
    assert [o["value"] for o in options] == ["Alta Street"]
    assert session.http.calls[-1] == ("GET", "/admin/values/address/search?query=street")


def test_citizen_field_mirrors_name(client):
    session = ClientSession("http://cad.test", http=FlaskTransport(client))
    assert session.login("user", "pw")
    form = FormState({"ownerId": "", "name": ""})
    field = CitizenSuggestionsField(session, form, "Owner", value_field_name="ownerId", label_field_name="name")

    options = field.fetch_options("john")
    assert [field.label_for(o) for o in options] == ["John Smith"]

    field.select(options[0])
    assert form.values["ownerId"] == options[0]["id"]
    assert form.values["name"] == "John Smith"

    field.type_text("Someone Else")
    assert form.values == {"ownerId": None, "name": "Someone Else"}


def test_citizen_field_without_custom_values_drops_text():
    form = FormState({"ownerId": "", "name": ""})
    field = CitizenSuggestionsField(_session(), form, "Owner", value_field_name="ownerId", allows_custom_value=False)
    field.type_text("Ghost")
    assert field.search == ""
    assert form.values == {"ownerId": None, "name": ""}
