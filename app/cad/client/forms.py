from __future__ import annotations

import mimetypes
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from app.cad.constants import ALLOWED_IMAGE_TYPES
from app.cad.schemas import Schema

T = TypeVar("T")

Validator = Callable[[Mapping[str, Any]], dict[str, str]]

DEFAULT_MAX_IMAGE_BYTES = 2 * 1024 * 1024


def handle_validate(schema: Schema) -> Validator:
    """Client fast path over the server's schema. The server still validates."""

    def validate(values: Mapping[str, Any]) -> dict[str, str]:
        return schema.errors_for(dict(values))

    return validate


class FormState:
    """Values and per-field errors for one form."""

    def __init__(self, initial_values: Mapping[str, Any], validate: Validator | None = None) -> None:
        self.initial_values = dict(initial_values)
        self.values: dict[str, Any] = dict(initial_values)
        self.errors: dict[str, str] = {}
        self.is_submitting = False
        self._validate = validate

    def set_field_value(self, name: str, value: Any, should_validate: bool = True) -> None:
        self.values[name] = value
        if should_validate:
            self.validate_form()

    def set_values(self, values: Mapping[str, Any], should_validate: bool = True) -> None:
        self.values = dict(values)
        if should_validate:
            self.validate_form()

    def set_errors(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)

    def set_field_error(self, name: str, message: str) -> None:
        self.errors[name] = message

    def validate_form(self) -> dict[str, str]:
        self.errors = self._validate(self.values) if self._validate else {}
        return self.errors

    @property
    def is_valid(self) -> bool:
        if not self._validate:
            return True
        return not self._validate(self.values)

    def reset(self) -> None:
        self.values = dict(self.initial_values)
        self.errors = {}

    def submit(self, on_submit: Callable[[dict[str, Any], "FormState"], T]) -> T | None:
        if self.validate_form():
            return None
        self.is_submitting = True
        try:
            return on_submit(dict(self.values), self)
        finally:
            self.is_submitting = False


@dataclass(frozen=True)
class UploadFile:
    filename: str
    content: bytes
    content_type: str

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadFile":
        p = Path(path)
        content_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        return cls(filename=p.name, content=p.read_bytes(), content_type=content_type)

    def as_request_file(self) -> tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)


def validate_file(
    image: UploadFile | str | None,
    helpers: FormState,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    field_name: str = "image",
) -> UploadFile | str | None:
    """
    A string is an already-stored file id and passes through untouched.
    An invalid upload records a field error and returns None.
    """
    if image is None or image == "":
        return None
    if isinstance(image, str):
        return image
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        helpers.set_field_error(field_name, "Image must be a PNG, JPEG, GIF or WebP file.")
        return None
    if len(image.content) > max_bytes:
        helpers.set_field_error(field_name, f"Image is too large (max {max_bytes // 1024} KB).")
        return None
    return image
