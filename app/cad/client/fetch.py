"""
Network calls with loading/error state, used by every client form.

Failures are reported once: field errors go to the form helpers when a
form is attached, everything else becomes an error toast. Nothing is
retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests

if TYPE_CHECKING:
    from app.cad.client.forms import FormState
    from app.cad.client.session import ClientSession

logger = logging.getLogger(__name__)

LOADING = "loading"
ERROR = "error"


@dataclass
class FetchResult:
    json: Any
    status_code: int | None
    error: str | None = None
    errors: dict[str, str] = field(default_factory=dict)
    discarded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.discarded and self.status_code is not None and self.status_code < 400


class FetchHook:
    def __init__(self, session: "ClientSession") -> None:
        self.session = session
        self.state: str | None = None
        self._mounted = True

    def unmount(self) -> None:
        """Results of requests still in flight are dropped once the owner is gone."""
        self._mounted = False

    def execute(
        self,
        path: str,
        method: str = "GET",
        *,
        data: Any = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        params: dict[str, Any] | None = None,
        helpers: "FormState | None" = None,
        headers: dict[str, str] | None = None,
    ) -> FetchResult:
        self.state = LOADING
        kwargs: dict[str, Any] = {
            "headers": {**self.session.headers(), **(headers or {})},
            "timeout": self.session.timeout,
        }
        if params:
            kwargs["params"] = params
        if files is not None:
            kwargs["files"] = files
            if data:
                kwargs["data"] = data
        elif data is not None:
            kwargs["json"] = data

        try:
            resp = self.session.http.request(method, self.session.url(path), **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            if not self._mounted:
                return FetchResult(json={}, status_code=None, discarded=True)
            self.state = ERROR
            self.session.notifier.error(str(e) or "Network error.")
            return FetchResult(json={}, status_code=None, error=str(e) or "Network error.")

        if not self._mounted:
            return FetchResult(json={}, status_code=resp.status_code, discarded=True)

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code < 400:
            self.state = None
            return FetchResult(json=body if body is not None else {}, status_code=resp.status_code)

        self.state = ERROR
        detail = f"Request failed ({resp.status_code})."
        field_errors: dict[str, str] = {}
        if isinstance(body, dict):
            detail = str(body.get("detail") or detail)
            if isinstance(body.get("errors"), dict):
                field_errors = {str(k): str(v) for k, v in body["errors"].items()}

        logger.info("%s %s -> %s %s", method, path, resp.status_code, detail)
        if field_errors and helpers is not None:
            helpers.set_errors({**helpers.errors, **field_errors})
        else:
            self.session.notifier.error(detail)
        return FetchResult(json={}, status_code=resp.status_code, error=detail, errors=field_errors)
