from conftest import login, user_id

from app.cad.audit import events_for
from app.cad.db import session_scope
from app.cad.modules.courthouse.models import CourthousePost

BODY = {"title": "Notice", "descriptionData": [{"type": "paragraph", "children": [{"text": "Court is in session."}]}]}


def _count_posts(app) -> int:
    with session_scope(app) as s:
        return s.query(CourthousePost).count()


def _create(client, title="Notice", **extra):
    r = client.post("/courthouse-posts", json={**BODY, "title": title, **extra})
    assert r.status_code == 200, r.get_json()
    return r.get_json()


def test_requires_auth(client):
    assert client.get("/courthouse-posts").status_code == 401


def test_base_rank_without_permission_is_forbidden(app, client):
    login(client, "user")
    r = client.post("/courthouse-posts", json=BODY)
    assert r.status_code == 403
    assert r.get_json()["code"] == "forbidden"
    assert _count_posts(app) == 0


def test_elevated_rank_creates_post_owned_by_caller(app, client):
    login(client, "admin")
    post = _create(client)
    assert post["title"] == "Notice"
    assert post["userId"] == user_id(app, "admin")
    assert post["user"]["username"] == "admin"
    assert _count_posts(app) == 1


def test_client_supplied_owner_is_ignored(app, client):
    login(client, "admin")
    post = _create(client, userId=user_id(app, "other"))
    assert post["userId"] == user_id(app, "admin")


def test_permission_grants_base_rank(app, client):
    login(client, "judge")
    post = _create(client, title="Hearing")
    assert post["userId"] == user_id(app, "judge")


def test_list_is_newest_first(client):
    login(client, "admin")
    first = _create(client, title="First")
    second = _create(client, title="Second")

    r = client.get("/courthouse-posts")
    assert r.status_code == 200
    ids = [p["id"] for p in r.get_json()]
    assert ids == [second["id"], first["id"]]


def test_any_authenticated_user_can_read(client):
    login(client, "admin")
    _create(client)
    client.post("/auth/logout")

    login(client, "user")
    r = client.get("/courthouse-posts")
    assert r.status_code == 200
    assert len(r.get_json()) == 1


def test_validation_lists_every_invalid_field(app, client):
    login(client, "admin")
    r = client.post("/courthouse-posts", json={"title": "x", "descriptionData": []})
    assert r.status_code == 400
    body = r.get_json()
    assert body["code"] == "validation_error"
    assert set(body["errors"]) == {"title", "descriptionData"}
    assert _count_posts(app) == 0


def test_update_keeps_author(app, client):
    login(client, "admin")
    post = _create(client)
    client.post("/auth/logout")

    login(client, "judge")
    r = client.put(f"/courthouse-posts/{post['id']}", json={**BODY, "title": "Updated", "userId": 12345})
    assert r.status_code == 200
    updated = r.get_json()
    assert updated["title"] == "Updated"
    assert updated["userId"] == user_id(app, "admin")


def test_elevated_rank_updates_post_by_another_user(app, client):
    login(client, "judge")
    post = _create(client)
    client.post("/auth/logout")

    login(client, "admin")
    r = client.put(f"/courthouse-posts/{post['id']}", json={**BODY, "title": "Edited by admin"})
    assert r.status_code == 200
    updated = r.get_json()
    assert updated["title"] == "Edited by admin"
    assert updated["userId"] == user_id(app, "judge")


def test_update_and_delete_unknown_post_is_404_for_any_actor(client):
    login(client, "user")
    r = client.put("/courthouse-posts/999", json=BODY)
    assert r.status_code == 404
    assert r.get_json()["code"] == "post_not_found"
    assert client.delete("/courthouse-posts/999").status_code == 404


def test_forbidden_update_and_delete_do_not_mutate(app, client):
    login(client, "admin")
    post = _create(client)
    client.post("/auth/logout")

    login(client, "user")
    r = client.put(f"/courthouse-posts/{post['id']}", json={**BODY, "title": "Hijacked"})
    assert r.status_code == 403
    assert client.delete(f"/courthouse-posts/{post['id']}").status_code == 403

    with session_scope(app) as s:
        row = s.get(CourthousePost, post["id"])
        assert row is not None
        assert row.title == "Notice"


def test_delete_removes_post_and_audits(app, client):
    login(client, "owner")
    post = _create(client)

    r = client.delete(f"/courthouse-posts/{post['id']}")
    assert r.status_code == 200
    assert r.get_json() is True
    assert _count_posts(app) == 0

    with session_scope(app) as s:
        trail = events_for(s, "CourthousePost", post["id"])
    assert [e.action for e in trail] == ["courthouse_post.create", "courthouse_post.delete"]
    assert trail[-1].actor_username == "owner"


def test_disabled_feature_hides_endpoints(app, client):
    login(client, "owner")
    r = client.put("/admin/settings/features", json={"feature": "COURTHOUSE", "isEnabled": False})
    assert r.status_code == 200
    assert r.get_json()["COURTHOUSE"] is False

    r = client.get("/courthouse-posts")
    assert r.status_code == 404
    assert r.get_json()["code"] == "feature_disabled"
    assert client.post("/courthouse-posts", json=BODY).status_code == 404
    assert _count_posts(app) == 0
