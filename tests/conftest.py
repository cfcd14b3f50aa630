import io

import pytest
from werkzeug.security import generate_password_hash

from app.cad import create_app
from app.cad.constants import Permissions, Rank, ValueType
from app.cad.db import session_scope
from app.cad.models import Base, Permission, Role, User
from app.cad.modules.cad_settings.models import CadSettings
from app.cad.modules.citizens.models import Citizen
from app.cad.modules.values.models import Value
from app.cad.modules.vehicles.models import RegisteredVehicle

PASSWORD = "pw"
BASE_URL = "http://cad.test"


def _hash(pw: str) -> str:
    # cheap hash keeps the suite fast
    return generate_password_hash(pw, method="pbkdf2:sha256:1000")


def _seed(s):
    perms = {key: Permission(key=key, name=name) for key, name in Permissions.ALL}
    s.add_all(perms.values())

    judge = Role(key="judge", name="Judge")
    judge.permissions.append(perms[Permissions.MANAGE_COURTHOUSE_POSTS])
    settings_manager = Role(key="settings_manager", name="Settings manager")
    settings_manager.permissions.append(perms[Permissions.MANAGE_CAD_SETTINGS])
    s.add_all([judge, settings_manager])

    users = {
        "owner": User(username="owner", password_hash=_hash(PASSWORD), rank=Rank.OWNER.value),
        "admin": User(username="admin", password_hash=_hash(PASSWORD), rank=Rank.ADMIN.value),
        "judge": User(username="judge", password_hash=_hash(PASSWORD), rank=Rank.USER.value),
        "manager": User(username="manager", password_hash=_hash(PASSWORD), rank=Rank.USER.value),
        "user": User(username="user", password_hash=_hash(PASSWORD), rank=Rank.USER.value),
        "other": User(username="other", password_hash=_hash(PASSWORD), rank=Rank.USER.value),
    }
    users["judge"].roles.append(judge)
    users["manager"].roles.append(settings_manager)
    s.add_all(users.values())

    s.add(CadSettings(name="Test CAD", area_of_play="Los Santos", registration_code="secret-code"))

    addresses = [
        Value(type=ValueType.ADDRESS.value, value=v, position=i)
        for i, v in enumerate(("Alta Street", "Grove Street", "Vinewood Boulevard"), start=1)
    ]
    sultan = Value(type=ValueType.VEHICLE.value, value="Sultan RS", position=1)
    s.add_all(addresses + [sultan])
    s.flush()

    jane = Citizen(user_id=users["user"].id, name="Jane", surname="Doe")
    john = Citizen(user_id=users["other"].id, name="John", surname="Smith")
    npc = Citizen(user_id=None, name="Npc", surname="Walker")
    s.add_all([jane, john, npc])
    s.flush()

    s.add(RegisteredVehicle(plate="ABC123", model_id=sultan.id, citizen_id=jane.id, user_id=users["user"].id))


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setenv("LOGO_MAX_BYTES", "1024")
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    app.config["TESTING"] = True

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        _seed(s)

    yield app
    engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, username: str, password: str = PASSWORD):
    """Log in and make every following request carry the CSRF header."""
    r = client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.get_json()
    client.environ_base["HTTP_X_CSRF_TOKEN"] = r.get_json()["csrfToken"]
    return r.get_json()["user"]


def user_id(app, username: str) -> int:
    with session_scope(app) as s:
        return s.query(User).filter(User.username == username).one().id


class FlaskResponse:
    def __init__(self, resp) -> None:
        self._resp = resp
        self.status_code = resp.status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        data = self._resp.get_json(silent=True)
        if data is None:
            raise ValueError("Response body is not JSON")
        return data


class FlaskTransport:
    """Stands in for requests.Session and routes calls into the Flask test client."""

    def __init__(self, client, base_url: str = BASE_URL) -> None:
        self.client = client
        self.base_url = base_url
        self.calls = []

    def request(self, method, url, *, json=None, data=None, files=None, params=None, headers=None, timeout=None):
        path = url[len(self.base_url):] if url.startswith(self.base_url) else url
        self.calls.append((method, path))
        kwargs = {"headers": headers or {}}
        if params:
            kwargs["query_string"] = params
        if files:
            form = dict(data or {})
            for name, (filename, content, content_type) in files.items():
                form[name] = (io.BytesIO(content), filename, content_type)
            kwargs["data"] = form
            kwargs["content_type"] = "multipart/form-data"
        elif json is not None:
            kwargs["json"] = json
        return FlaskResponse(self.client.open(path, method=method, **kwargs))


class FakeResponse:
    def __init__(self, status_code: int, body=None) -> None:
        self.status_code = status_code
        self._body = body

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("Response body is not JSON")
        return self._body


class ScriptedTransport:
    """Replays canned responses (or raises canned exceptions) in order."""

    def __init__(self, responses) -> None:
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r
