from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.cad.constants import Feature
from app.cad.db import db_session
from app.cad.errors import NotFoundError
from app.cad.features import require_feature
from app.cad.modules.courthouse.models import CourthousePost
from app.cad.modules.courthouse.service import (
    create_post,
    delete_post,
    get_post,
    list_posts,
    serialize_post,
    update_post,
)
from app.cad.rbac import COURTHOUSE_POSTS_RULE, authorize, current_user, require_auth
from app.cad.schemas import COURTHOUSE_POST_SCHEMA, validate_schema

bp = Blueprint("courthouse", __name__)


def _get_post_or_404(post_id: int) -> CourthousePost:
    post = get_post(db_session(), post_id)
    if not post:
        raise NotFoundError("Post not found", code="post_not_found")
    return post


# ---------- List ----------
@bp.get("/courthouse-posts")
@require_auth
@require_feature(Feature.COURTHOUSE)
def posts_list():
    posts = list_posts(db_session())
    return jsonify([serialize_post(p) for p in posts])


# ---------- Create ----------
@bp.post("/courthouse-posts")
@require_auth
@require_feature(Feature.COURTHOUSE)
def posts_create():
    s = db_session()
    u = current_user()

    data = validate_schema(COURTHOUSE_POST_SCHEMA, request.get_json(silent=True))
    authorize(u, COURTHOUSE_POSTS_RULE)

    post = create_post(s, data, u)
    s.commit()
    return jsonify(serialize_post(post))


# ---------- Update ----------
@bp.put("/courthouse-posts/<int:post_id>")
@require_auth
@require_feature(Feature.COURTHOUSE)
def posts_update(post_id: int):
    s = db_session()
    u = current_user()

    data = validate_schema(COURTHOUSE_POST_SCHEMA, request.get_json(silent=True))
    post = _get_post_or_404(post_id)
    authorize(u, COURTHOUSE_POSTS_RULE)

    update_post(s, post, data, u)
    s.commit()
    return jsonify(serialize_post(post))


# ---------- Delete ----------
@bp.delete("/courthouse-posts/<int:post_id>")
@require_auth
@require_feature(Feature.COURTHOUSE)
def posts_delete(post_id: int):
    s = db_session()
    u = current_user()

    post = _get_post_or_404(post_id)
    authorize(u, COURTHOUSE_POSTS_RULE)

    delete_post(s, post, u)
    s.commit()
    return jsonify(True)
