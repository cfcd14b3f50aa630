"""
Request body schemas shared by the API handlers and the admin client.

Nothing here touches the request, so the client can validate forms with
the exact same definitions the server enforces. All violations are collected
before `ValidationError` is raised so callers get every field at once.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.cad.errors import ValidationError

_MISSING = object()


@dataclass(frozen=True)
class Field:
    optional: bool = False

    def check(self, value: Any) -> tuple[Any, str | None]:
        raise NotImplementedError

    def default(self) -> Any:
        return None


@dataclass(frozen=True)
class String(Field):
    min_length: int = 0
    max_length: int | None = None
    allow_int: bool = False

    def check(self, value: Any) -> tuple[Any, str | None]:
        if self.allow_int and isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            return None, "Must be a string."
        value = value.strip()
        if self.optional and value == "":
            return None, None
        if len(value) < self.min_length:
            if self.min_length <= 1:
                return None, "This field is required."
            return None, f"Must be at least {self.min_length} characters."
        if self.max_length is not None and len(value) > self.max_length:
            return None, f"Must be at most {self.max_length} characters."
        return value, None


@dataclass(frozen=True)
class Boolean(Field):
    missing_value: bool | None = None

    def check(self, value: Any) -> tuple[Any, str | None]:
        if not isinstance(value, bool):
            return None, "Must be true or false."
        return value, None

    def default(self) -> Any:
        return self.missing_value


@dataclass(frozen=True)
class JsonList(Field):
    min_items: int = 0

    def check(self, value: Any) -> tuple[Any, str | None]:
        if not isinstance(value, list):
            return None, "Must be a list."
        if len(value) < self.min_items:
            return None, "This field is required." if self.min_items == 1 else f"Must contain at least {self.min_items} items."
        return value, None


@dataclass(frozen=True)
class Schema:
    name: str
    fields: dict[str, Field] = field(default_factory=dict)

    def errors_for(self, body: Any) -> dict[str, str]:
        try:
            self.clean(body)
        except ValidationError as e:
            return e.errors
        return {}

    def clean(self, body: Any) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise ValidationError({"body": "Request body must be a JSON object."})

        data: dict[str, Any] = {}
        errors: dict[str, str] = {}
        for key, spec in self.fields.items():
            raw = body.get(key, _MISSING)
            if raw is _MISSING or raw is None:
                if spec.optional:
                    data[key] = spec.default()
                    continue
                errors[key] = "This field is required."
                continue
            value, err = spec.check(raw)
            if err:
                errors[key] = err
                continue
            data[key] = value
        if errors:
            raise ValidationError(errors)
        return data


def validate_schema(schema: Schema, body: Any) -> dict[str, Any]:
    """
    Validate an untrusted body. Returns only the schema's fields; unknown keys are dropped.
    """
    return schema.clean(body)


COURTHOUSE_POST_SCHEMA = Schema(
    "courthouse_post",
    {
        "title": String(min_length=2, max_length=255),
        "descriptionData": JsonList(min_items=1),
    },
)

CAD_SETTINGS_SCHEMA = Schema(
    "cad_settings",
    {
        "name": String(min_length=1, max_length=255),
        "areaOfPlay": String(optional=True, max_length=255),
        "steamApiKey": String(optional=True, max_length=255),
        "whitelisted": Boolean(optional=True, missing_value=False),
        "towWhitelisted": Boolean(optional=True, missing_value=False),
        "taxiWhitelisted": Boolean(optional=True, missing_value=False),
        "businessWhitelisted": Boolean(optional=True, missing_value=False),
        "registrationCode": String(optional=True, max_length=255),
        "roleplayEnabled": Boolean(optional=True, missing_value=True),
        "logoId": String(optional=True, max_length=255),
    },
)

TRANSFER_VEHICLE_SCHEMA = Schema(
    "transfer_vehicle",
    {
        "ownerId": String(min_length=1, max_length=64, allow_int=True),
        "name": String(min_length=1, max_length=255),
    },
)

VALUE_SCHEMA = Schema(
    "value",
    {
        "value": String(min_length=1, max_length=255),
    },
)

FEATURE_SCHEMA = Schema(
    "feature",
    {
        "feature": String(min_length=1, max_length=64),
        "isEnabled": Boolean(),
    },
)
