from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.cad.audit import record_event
from app.cad.modules.courthouse.models import CourthousePost
from app.cad.utils import isoformat, user_projection

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cad.models import User


def serialize_post(post: CourthousePost) -> dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "descriptionData": post.description_data,
        "userId": post.user_id,
        "user": user_projection(post.user),
        "createdAt": isoformat(post.created_at),
        "updatedAt": isoformat(post.updated_at),
    }


def list_posts(s: "Session") -> list[CourthousePost]:
    """All posts, newest first (id breaks ties between identical timestamps)."""
    return (
        s.query(CourthousePost)
        .order_by(CourthousePost.created_at.desc(), CourthousePost.id.desc())
        .all()
    )


def get_post(s: "Session", post_id: int) -> CourthousePost | None:
    return s.get(CourthousePost, post_id)


def create_post(s: "Session", data: dict, user: "User") -> CourthousePost:
    """Create a post owned by `user`. `data` must already be schema-validated."""
    now = datetime.utcnow()
    post = CourthousePost(
        title=data["title"],
        description_data=data["descriptionData"],
        user_id=user.id,
        created_at=now,
        updated_at=now,
    )
    post.user = user
    s.add(post)
    s.flush()

    record_event(
        s,
        actor=user,
        action="courthouse_post.create",
        entity_type="CourthousePost",
        entity_id=str(post.id),
        metadata={"title": post.title},
    )
    return post


def update_post(s: "Session", post: CourthousePost, data: dict, user: "User") -> CourthousePost:
    """Only title and description change; the author is never reassigned."""
    changes = {}
    if data["title"] != post.title:
        changes["title"] = {"old": post.title, "new": data["title"]}
    post.title = data["title"]
    post.description_data = data["descriptionData"]
    post.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=user,
        action="courthouse_post.edit",
        entity_type="CourthousePost",
        entity_id=str(post.id),
        metadata={"changes": changes},
    )
    return post


def delete_post(s: "Session", post: CourthousePost, user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="courthouse_post.delete",
        entity_type="CourthousePost",
        entity_id=str(post.id),
        metadata={"title": post.title, "author_user_id": post.user_id},
    )
    s.delete(post)
