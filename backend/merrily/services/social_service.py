# Overview: Service-layer operations for the staff feed: posts, comments and likes.

"""
Social Service

Authorship is checked here, not in routes: edits and deletes by anyone other
than the author raise PermissionDeniedError. Notifications are side effects;
a failed notification never fails the post, comment or like that caused it.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Post, Comment, PostLike, UserProfile
from ..validation import ValidationError, NotFoundError, PermissionDeniedError, require_int
from . import notification_service, storage_service
from merrily.time_utils import utcnow

COMMENT_PREVIEW_LENGTH = 30


def _display_name(user_id: str) -> str:
    profile = db.session.get(UserProfile, user_id)
    return profile.display_name if profile and profile.display_name else "User"


def _clean_text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------

def list_posts() -> list[Post]:
    return Post.active().order_by(Post.created_at.desc(), Post.id.desc()).all()


def get_post(post_id: int) -> Post:
    post = Post.active().filter(Post.id == post_id).first()
    if post is None:
        raise NotFoundError("Post not found")
    return post


def create_post(
    *,
    user_id: str,
    title=None,
    content=None,
    images: list | None = None,
    image_urls: list[str] | None = None,
    access_token: str | None = None,
) -> Post:
    """
    Create a post and tell everyone else about it.

    images: uploaded files as (filename, content_type, bytes) tuples; they are
    stored first and failures are skipped. image_urls: already-public URLs
    (JSON clients).
    """
    title = _clean_text(title)
    content = _clean_text(content)

    urls = [u for u in (image_urls or []) if isinstance(u, str) and u]
    if images:
        urls.extend(storage_service.upload_post_images(user_id=user_id, files=images, access_token=access_token))

    if not title and not content and not urls:
        raise ValidationError("A post needs a title, content or at least one image")

    post = Post(user_id=user_id, title=title, content=content, images=urls)
    db.session.add(post)
    db.session.commit()

    notification_service.safe_notify_all_users(
        type=notification_service.TYPE_NEW_POST,
        title="New post",
        message=f"{_display_name(user_id)} posted",
        link="/",
        exclude_user_id=user_id,
    )
    return post


def _owned_post(post_id: int, user_id: str) -> Post:
    post = get_post(post_id)
    if post.user_id != user_id:
        raise PermissionDeniedError("Only the author can change this post")
    return post


def update_post(*, post_id: int, user_id: str, payload: dict) -> Post:
    post = _owned_post(post_id, user_id)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    if "title" in payload:
        post.title = _clean_text(payload["title"])
    if "content" in payload:
        post.content = _clean_text(payload["content"])
    if not post.title and not post.content and not post.images:
        raise ValidationError("A post needs a title, content or at least one image")
    db.session.commit()
    return post


def delete_post(*, post_id: int, user_id: str, access_token: str | None) -> None:
    post = _owned_post(post_id, user_id)
    if post.images:
        storage_service.remove_post_images(urls=list(post.images), access_token=access_token)
    post.deleted_at = utcnow()
    db.session.commit()


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

def list_comments(post_id) -> list[Comment]:
    post_id = require_int(post_id, "post_id")
    return (
        Comment.active()
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )


def create_comment(*, user_id: str, post_id, content) -> Comment:
    content = _clean_text(content)
    if not content:
        raise ValidationError("content is required")
    post = get_post(require_int(post_id, "post_id"))

    comment = Comment(post_id=post.id, user_id=user_id, content=content)
    db.session.add(comment)
    db.session.commit()

    if post.user_id != user_id:
        notification_service.safe_notify_user(
            user_id=post.user_id,
            type=notification_service.TYPE_NEW_COMMENT,
            title="Comment",
            message=(
                f"{_display_name(user_id)} commented on your post \"{post.preview()}\": "
                f"{content[:COMMENT_PREVIEW_LENGTH]}"
            ),
            link="/",
            data={"post_id": post.id, "comment_id": comment.id},
        )
    return comment


def _owned_comment(comment_id: int, user_id: str) -> Comment:
    comment = Comment.active().filter(Comment.id == comment_id).first()
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.user_id != user_id:
        raise PermissionDeniedError("Only the author can change this comment")
    return comment


def update_comment(*, comment_id: int, user_id: str, content) -> Comment:
    comment = _owned_comment(comment_id, user_id)
    content = _clean_text(content)
    if not content:
        raise ValidationError("content is required")
    comment.content = content
    db.session.commit()
    return comment


def delete_comment(*, comment_id: int, user_id: str) -> None:
    comment = _owned_comment(comment_id, user_id)
    comment.deleted_at = utcnow()
    db.session.commit()


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------

def toggle_like(*, user_id: str, post_id) -> bool:
    """Like or unlike. Returns True when the post is liked afterwards."""
    post = get_post(require_int(post_id, "post_id"))
    existing = db.session.query(PostLike).filter_by(post_id=post.id, user_id=user_id).first()
    if existing is not None:
        db.session.delete(existing)
        db.session.commit()
        return False

    db.session.add(PostLike(post_id=post.id, user_id=user_id))
    db.session.commit()

    if post.user_id != user_id:
        notification_service.safe_notify_user(
            user_id=post.user_id,
            type=notification_service.TYPE_NEW_LIKE,
            title="Like",
            message=f"{_display_name(user_id)} liked your post \"{post.preview()}\"",
            link="/",
            data={"post_id": post.id},
        )
    return True


def list_likes(post_id) -> list[PostLike]:
    post_id = require_int(post_id, "post_id")
    return (
        db.session.query(PostLike)
        .filter(PostLike.post_id == post_id)
        .order_by(PostLike.created_at.desc(), PostLike.id.desc())
        .all()
    )
