"""
Searchable select fields.

The committed value (an item id) lives in the form state; the text shown in
the input is kept locally so closing the menu cannot wipe what the user sees.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import quote

from app.cad.client.fetch import FetchHook
from app.cad.client.forms import FormState
from app.cad.client.session import ClientSession
from app.cad.constants import ValueType

Item = Mapping[str, Any]


def get_value_str(item: Item) -> str:
    """Label of a reference value; nested values (vehicle models, weapons) carry it one level down."""
    value = item.get("value")
    if isinstance(value, Mapping):
        return str(value.get("value") or "")
    return str(value or "")


class AsyncSelectField(ABC):
    def __init__(
        self,
        session: ClientSession,
        form: FormState,
        field_name: str,
        label: str,
        items: Iterable[Item] = (),
        on_selection_change: Callable[[Item | None], None] | None = None,
        filter_fn: Callable[[Item, int], bool] | None = None,
        is_optional: bool = False,
        is_disabled: bool = False,
        is_clearable: bool = False,
    ) -> None:
        self.session = session
        self.form = form
        self.field_name = field_name
        self.label = label
        self.items: list[Item] = list(items)
        self.options: list[Item] = []
        self.on_selection_change = on_selection_change
        self.filter_fn = filter_fn
        self.is_optional = is_optional
        self.is_disabled = is_disabled
        self.is_clearable = is_clearable
        self.fetch = FetchHook(session)
        self.search = self.default_search_value()

    @abstractmethod
    def label_for(self, item: Item) -> str: ...

    @abstractmethod
    def api_path(self, input_value: str) -> str: ...

    @property
    def value(self) -> Any:
        return self.form.values.get(self.field_name)

    @property
    def error(self) -> str | None:
        return self.form.errors.get(self.field_name)

    def default_search_value(self) -> str:
        current = self.value
        if current in (None, ""):
            return ""
        for item in self.items:
            if str(item.get("id")) == str(current):
                return self.label_for(item)
        return ""

    def handle_suggestion_press(self, node: Item | None = None, local_value: str | None = None) -> None:
        # Closing the menu reports neither an item nor text; keep what is displayed.
        if node is None and local_value is None:
            return

        if local_value is not None:
            self.search = local_value
        elif node is not None:
            self.search = self.label_for(node)

        self._commit(node)
        if self.on_selection_change:
            self.on_selection_change(node)

    def _commit(self, node: Item | None) -> None:
        self.form.set_values({**self.form.values, self.field_name: node.get("id") if node else None})

    def select(self, item: Item) -> None:
        self.handle_suggestion_press(node=item, local_value=self.label_for(item))

    def type_text(self, text: str) -> None:
        self.handle_suggestion_press(node=None, local_value=text)

    def close_menu(self) -> None:
        self.handle_suggestion_press()

    def clear(self) -> None:
        if self.is_clearable:
            self.handle_suggestion_press(node=None, local_value="")

    def fetch_options(self, input_value: str | None = None) -> list[Item]:
        """Server-side search; empty text is a valid query."""
        text = self.search if input_value is None else input_value
        result = self.fetch.execute(self.api_path(text))
        items = result.json if result.ok and isinstance(result.json, list) else []
        if self.filter_fn:
            items = [item for i, item in enumerate(items) if self.filter_fn(item, i)]
        self.options = items
        return items


class ValueSelectField(AsyncSelectField):
    def __init__(
        self,
        session: ClientSession,
        form: FormState,
        field_name: str,
        value_type: ValueType,
        label: str,
        values: Iterable[Item] | None = None,
        **kwargs: Any,
    ) -> None:
        self.value_type = value_type
        session.values.ensure_loaded([ValueType.ADDRESS])
        if values is None:
            values = session.values.get(value_type)
        super().__init__(session, form, field_name, label, items=values, **kwargs)

    def label_for(self, item: Item) -> str:
        return get_value_str(item)

    def api_path(self, input_value: str) -> str:
        return f"/admin/values/{self.value_type.value.lower()}/search?query={quote(input_value)}"


class CitizenSuggestionsField(AsyncSelectField):
    """Owner picker: commits the citizen id and mirrors the typed/selected name into a second field."""

    def __init__(
        self,
        session: ClientSession,
        form: FormState,
        label: str,
        value_field_name: str = "citizenId",
        label_field_name: str = "name",
        allows_custom_value: bool = True,
        **kwargs: Any,
    ) -> None:
        self.label_field_name = label_field_name
        self.allows_custom_value = allows_custom_value
        super().__init__(session, form, value_field_name, label, **kwargs)
        if not self.search:
            self.search = str(form.values.get(label_field_name) or "")

    def label_for(self, item: Item) -> str:
        return f"{item.get('name') or ''} {item.get('surname') or ''}".strip()

    def api_path(self, input_value: str) -> str:
        return f"/citizens/search?query={quote(input_value)}"

    def _commit(self, node: Item | None) -> None:
        if node is None and not self.allows_custom_value:
            self.search = ""
        values = {
            **self.form.values,
            self.field_name: node.get("id") if node else None,
            self.label_field_name: self.label_for(node) if node else self.search,
        }
        self.form.set_values(values)
