"""
Central constants for the CAD application.
"""
from __future__ import annotations

import enum


class Rank(str, enum.Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    USER = "USER"


# Rank every new account starts with; anything else counts as elevated.
BASE_RANK = Rank.USER


class Permissions:
    MANAGE_COURTHOUSE_POSTS = "ManageCourthousePosts"
    MANAGE_CAD_SETTINGS = "ManageCadSettings"
    MANAGE_VALUES = "ManageValues"

    ALL = (
        (MANAGE_COURTHOUSE_POSTS, "Courthouse: manage posts"),
        (MANAGE_CAD_SETTINGS, "CAD settings: manage"),
        (MANAGE_VALUES, "Values: manage"),
    )


class Feature(str, enum.Enum):
    COURTHOUSE = "COURTHOUSE"
    AOP = "AOP"
    TOW = "TOW"
    TAXI = "TAXI"
    BUSINESS = "BUSINESS"
    ALLOW_REGULAR_LOGIN = "ALLOW_REGULAR_LOGIN"


class ValueType(str, enum.Enum):
    ADDRESS = "ADDRESS"
    VEHICLE = "VEHICLE"
    GENDER = "GENDER"
    ETHNICITY = "ETHNICITY"
    LICENSE = "LICENSE"
    WEAPON = "WEAPON"

    @classmethod
    def from_path(cls, raw: str) -> "ValueType | None":
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return None


VALUE_SEARCH_LIMIT = 35

ALLOWED_IMAGE_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
