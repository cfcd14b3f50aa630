import os
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.cad.constants import Permissions, Rank, ValueType  # noqa: E402
from app.cad.models import Permission, Role, User  # noqa: E402
from app.cad.modules.cad_settings.models import CadSettings  # noqa: E402
from app.cad.modules.values.models import Value  # noqa: E402
from scripts._db_utils import resolve_database_url, script_session  # noqa: E402

DEFAULT_ADDRESSES = ("Alta Street", "Grove Street", "Vinewood Boulevard")


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed permissions/roles/owner user/settings in an idempotent way.
    Does NOT overwrite an existing owner's password.
    """
    owner_username = (os.environ.get("OWNER_USERNAME") or "owner").strip()
    owner_password = os.environ.get("OWNER_PASSWORD") or "change-me"

    db_url = resolve_database_url(database_url)

    with script_session(db_url) as s:
        def ensure_perm(key: str, name: str) -> Permission:
            p = s.query(Permission).filter(Permission.key == key).one_or_none()
            if not p:
                p = Permission(key=key, name=name)
                s.add(p)
            return p

        perms = [ensure_perm(key, name) for key, name in Permissions.ALL]

        role_admin = s.query(Role).filter(Role.key == "admin").one_or_none()
        if not role_admin:
            role_admin = Role(key="admin", name="Administrator")
            s.add(role_admin)
        for p in perms:
            if p not in role_admin.permissions:
                role_admin.permissions.append(p)

        user = s.query(User).filter(User.username == owner_username).one_or_none()
        if not user:
            user = User(
                username=owner_username,
                password_hash=generate_password_hash(owner_password),
                rank=Rank.OWNER.value,
                is_active=True,
            )
            s.add(user)
        if role_admin not in user.roles:
            user.roles.append(role_admin)

        if s.query(CadSettings).first() is None:
            s.add(CadSettings(name=(os.environ.get("CAD_NAME") or "My CAD").strip()))

        if s.query(Value).filter(Value.type == ValueType.ADDRESS.value).first() is None:
            for position, address in enumerate(DEFAULT_ADDRESSES, start=1):
                s.add(Value(type=ValueType.ADDRESS.value, value=address, position=position))

    print("Initialized database (seed_only).")
    print(f"Owner username: {owner_username}")
    print("Owner password: (from OWNER_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
