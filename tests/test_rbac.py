"""Permission evaluator: explicit permission set OR rank fallback."""
import pytest

from app.cad.constants import Rank
from app.cad.errors import ForbiddenError
from app.cad.models import Permission, Role, User
from app.cad.rbac import (
    CAD_SETTINGS_RULE,
    COURTHOUSE_POSTS_RULE,
    PermissionRule,
    authorize,
    is_allowed,
    user_has_permission,
)


def _user(rank: Rank, *permission_keys: str, is_active: bool = True) -> User:
    u = User(username=f"u-{rank.value}", password_hash="x", rank=rank.value, is_active=is_active)
    if permission_keys:
        role = Role(key="r", name="R")
        for key in permission_keys:
            role.permissions.append(Permission(key=key, name=key))
        u.roles.append(role)
    return u


def test_permission_set_path_grants_base_rank():
    u = _user(Rank.USER, "ManageCourthousePosts")
    assert user_has_permission(u, "ManageCourthousePosts")
    assert is_allowed(u, COURTHOUSE_POSTS_RULE)


@pytest.mark.parametrize("rank", [Rank.ADMIN, Rank.OWNER])
def test_rank_fallback_grants_without_permission(rank):
    u = _user(rank)
    assert not user_has_permission(u, "ManageCourthousePosts")
    assert is_allowed(u, COURTHOUSE_POSTS_RULE)


def test_base_rank_without_permission_denied():
    u = _user(Rank.USER, "SomethingElse")
    assert not is_allowed(u, COURTHOUSE_POSTS_RULE)
    with pytest.raises(ForbiddenError) as exc:
        authorize(u, COURTHOUSE_POSTS_RULE)
    assert exc.value.missing == ("ManageCourthousePosts",)


def test_owner_only_fallback():
    assert is_allowed(_user(Rank.OWNER), CAD_SETTINGS_RULE)
    assert not is_allowed(_user(Rank.ADMIN), CAD_SETTINGS_RULE)
    assert is_allowed(_user(Rank.ADMIN, "ManageCadSettings"), CAD_SETTINGS_RULE)


def test_inactive_user_never_allowed():
    u = _user(Rank.OWNER, "ManageCourthousePosts", is_active=False)
    assert not is_allowed(u, COURTHOUSE_POSTS_RULE)


def test_rule_without_fallback():
    rule = PermissionRule(permissions=("A", "B"))
    assert is_allowed(_user(Rank.USER, "B"), rule)
    assert not is_allowed(_user(Rank.OWNER), rule)
    assert not is_allowed(None, rule)
