from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import requests

from app.cad.client.fetch import FetchHook
from app.cad.client.state import ModalState, Notifier, Snapshot, Store
from app.cad.constants import ValueType

logger = logging.getLogger(__name__)


class ReferenceValueCache:
    """
    Reference values (addresses, vehicle models, ...) owned by one client session.

    `ensure_loaded` is idempotent: each value type is requested at most once per
    session, however many select fields ask for it.
    """

    def __init__(self, session: "ClientSession") -> None:
        self._session = session
        self._values: dict[ValueType, list[dict[str, Any]]] = {}
        self._requested: set[ValueType] = set()

    def is_requested(self, value_type: ValueType) -> bool:
        return value_type in self._requested

    def get(self, value_type: ValueType) -> list[dict[str, Any]]:
        return list(self._values.get(value_type, []))

    def ensure_loaded(self, value_types: Iterable[ValueType]) -> None:
        missing = [vt for vt in value_types if vt not in self._requested]
        if not missing:
            return
        # Marked before the request resolves so a failed fetch is not repeated either.
        self._requested.update(missing)

        result = FetchHook(self._session).execute(
            "/admin/values",
            params={"types": ",".join(vt.value.lower() for vt in missing)},
        )
        if not result.ok or not isinstance(result.json, list):
            return
        for group in result.json:
            vt = ValueType.from_path(str(group.get("type") or ""))
            if vt is not None:
                self._values[vt] = list(group.get("values") or [])


class ClientSession:
    """Everything one signed-in admin client shares across its components."""

    def __init__(self, base_url: str, http: Any = None, timeout: float = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.csrf_token: str | None = None
        self.user: dict[str, Any] | None = None

        self.cad = Store()
        self.notifier = Notifier()
        self.modals = ModalState()
        self.values = ReferenceValueCache(self)

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def headers(self) -> dict[str, str]:
        h = {"Accept": "application/json"}
        if self.csrf_token:
            h["X-CSRF-Token"] = self.csrf_token
        return h

    def login(self, username: str, password: str) -> bool:
        result = FetchHook(self).execute("/auth/login", "POST", data={"username": username, "password": password})
        if not result.ok:
            return False
        self.user = result.json.get("user")
        self.csrf_token = result.json.get("csrfToken")
        logger.info("Signed in as %s", (self.user or {}).get("username"))
        return True

    def load_settings(self) -> Snapshot | None:
        result = FetchHook(self).execute("/admin/settings")
        if result.ok:
            return self.cad.set(result.json)
        return self.cad.get()

    def is_feature_enabled(self, feature: str) -> bool:
        cad = self.cad.get() or {}
        features = cad.get("features") or {}
        return bool(features.get(feature, True))
