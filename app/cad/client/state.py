"""
Client-side shared state.

Snapshots are read-only mappings. Reconciling a server response never
mutates the current snapshot: `patch` shallow-merges the changes into a
new one, so keys missing from the response keep their previous values.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Any]


def freeze(data: Mapping[str, Any]) -> Snapshot:
    return MappingProxyType(dict(data))


def patch(snapshot: Snapshot | None, changes: Mapping[str, Any]) -> Snapshot:
    merged = dict(snapshot or {})
    merged.update(changes)
    return freeze(merged)


class Store:
    """Holds one snapshot (e.g. the deployment settings) and notifies subscribers on change."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._snapshot: Snapshot | None = freeze(initial) if initial is not None else None
        self._listeners: list[Callable[[Snapshot | None], None]] = []

    def get(self) -> Snapshot | None:
        return self._snapshot

    def set(self, data: Mapping[str, Any] | None) -> Snapshot | None:
        self._snapshot = freeze(data) if data is not None else None
        self._emit()
        return self._snapshot

    def patch(self, changes: Mapping[str, Any]) -> Snapshot:
        self._snapshot = patch(self._snapshot, changes)
        self._emit()
        return self._snapshot

    def subscribe(self, listener: Callable[[Snapshot | None], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._snapshot)


@dataclass(frozen=True)
class Toast:
    icon: str  # "success" | "error"
    title: str
    message: str


class Notifier:
    def __init__(self) -> None:
        self.messages: list[Toast] = []

    def toast(self, icon: str, title: str, message: str) -> Toast:
        t = Toast(icon=icon, title=title, message=message)
        self.messages.append(t)
        log = logger.info if icon == "success" else logger.warning
        log("%s: %s", title, message)
        return t

    def success(self, message: str, title: str = "Success") -> Toast:
        return self.toast("success", title, message)

    def error(self, message: str, title: str = "Error") -> Toast:
        return self.toast("error", title, message)

    @property
    def last(self) -> Toast | None:
        return self.messages[-1] if self.messages else None


class ModalState:
    def __init__(self) -> None:
        self._open: dict[str, Any] = {}

    def open_modal(self, modal_id: str, payload: Any = None) -> None:
        self._open[modal_id] = payload

    def close_modal(self, modal_id: str) -> None:
        self._open.pop(modal_id, None)

    def is_open(self, modal_id: str) -> bool:
        return modal_id in self._open

    def payload(self, modal_id: str) -> Any:
        return self._open.get(modal_id)
