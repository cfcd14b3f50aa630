from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import g

from app.cad.constants import BASE_RANK, Permissions
from app.cad.errors import ForbiddenError, UnauthorizedError
from app.cad.models import User


def user_has_permission(user: User | None, permission_key: str) -> bool:
    if not user or not user.is_active:
        return False
    return permission_key in user.permission_keys


def user_has_any_permission(user: User | None, permission_keys: Iterable[str]) -> bool:
    if not user or not user.is_active:
        return False
    return not user.permission_keys.isdisjoint(permission_keys)


def rank_is_elevated(user: User) -> bool:
    return user.rank != BASE_RANK.value


def rank_is_owner(user: User) -> bool:
    return user.is_owner


@dataclass(frozen=True)
class PermissionRule:
    """
    Explicit permission set plus an optional fallback predicate.
    Either path grants access on its own.
    """

    permissions: tuple[str, ...]
    fallback: Callable[[User], bool] | None = None


def is_allowed(user: User | None, rule: PermissionRule) -> bool:
    if not user or not user.is_active:
        return False
    if user_has_any_permission(user, rule.permissions):
        return True
    return bool(rule.fallback and rule.fallback(user))


def authorize(user: User | None, rule: PermissionRule) -> None:
    if not is_allowed(user, rule):
        raise ForbiddenError(missing=rule.permissions)


def current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise UnauthorizedError()
    return u


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        user: User | None = getattr(g, "current_user", None)
        if not user or not user.is_active:
            raise UnauthorizedError()
        return fn(*args, **kwargs)

    return wrapped


COURTHOUSE_POSTS_RULE = PermissionRule(
    permissions=(Permissions.MANAGE_COURTHOUSE_POSTS,),
    fallback=rank_is_elevated,
)

CAD_SETTINGS_RULE = PermissionRule(
    permissions=(Permissions.MANAGE_CAD_SETTINGS,),
    fallback=rank_is_owner,
)

VALUES_RULE = PermissionRule(
    permissions=(Permissions.MANAGE_VALUES,),
    fallback=rank_is_elevated,
)
