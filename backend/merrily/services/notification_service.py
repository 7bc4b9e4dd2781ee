# Overview: Service-layer operations for in-app notifications and push subscriptions.

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Notification, PushSubscription, UserProfile
from ..validation import ValidationError, NotFoundError

TYPE_NEW_POST = "new_post"
TYPE_NEW_COMMENT = "new_comment"
TYPE_NEW_LIKE = "new_like"
TYPE_WELCOME = "welcome"
TYPE_ANNOUNCEMENT = "announcement"

DEFAULT_LINK = "/"
DEFAULT_ICON = "/icon-192x192.png"
PUSH_TAG = "merrily-notification"


def notify_user(
    *,
    user_id: str,
    type: str,
    title: str,
    message: str,
    link: str | None = None,
    data: dict | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        link=link or DEFAULT_LINK,
        data=data,
    )
    db.session.add(notification)
    db.session.commit()
    return notification


def notify_all_users(
    *,
    type: str,
    title: str,
    message: str,
    link: str | None = None,
    exclude_user_id: str | None = None,
) -> int:
    """Insert one notification per known profile, skipping exclude_user_id. Returns the count."""
    query = db.session.query(UserProfile.id)
    if exclude_user_id:
        query = query.filter(UserProfile.id != exclude_user_id)
    user_ids = [row.id for row in query.all()]

    db.session.add_all(
        Notification(user_id=uid, type=type, title=title, message=message, link=link or DEFAULT_LINK)
        for uid in user_ids
    )
    db.session.commit()
    current_app.logger.info("Sent %s notifications type=%s", len(user_ids), type)
    return len(user_ids)


def broadcast(*, type: str, title: str, message: str, link: str | None = None) -> Notification:
    """One row with no user_id; every signed-in user sees it."""
    notification = Notification(user_id=None, type=type, title=title, message=message, link=link or DEFAULT_LINK)
    db.session.add(notification)
    db.session.commit()
    return notification


def safe_notify_user(**kwargs) -> Notification | None:
    """notify_user for side effects that must not fail the calling request."""
    try:
        return notify_user(**kwargs)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to send notification")
        return None


def safe_notify_all_users(**kwargs) -> int:
    try:
        return notify_all_users(**kwargs)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to fan out notifications")
        return 0


def _visible_to(user_id: str):
    return db.session.query(Notification).filter(
        or_(Notification.user_id == user_id, Notification.user_id.is_(None))
    )


def list_for_user(user_id: str, *, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    query = _visible_to(user_id)
    if unread_only:
        query = _unread(query, user_id)
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def _unread(query, user_id: str):
    # Broadcast rows carry no per-user read flag, so they never count as unread
    return query.filter(Notification.user_id == user_id, Notification.is_read.is_(False))


def unread_count(user_id: str) -> int:
    return _unread(_visible_to(user_id), user_id).count()


def mark_read(*, notification_id: int, user_id: str) -> Notification:
    notification = (
        db.session.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    db.session.commit()
    return notification


def mark_all_read(user_id: str) -> int:
    updated = (
        db.session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({"is_read": True}, synchronize_session=False)
    )
    db.session.commit()
    return updated


def build_push_payload(
    *,
    title: str,
    body: str,
    url: str | None = None,
    icon: str | None = None,
    tag: str | None = None,
) -> dict:
    """Payload understood by the service worker's push handler."""
    return {
        "title": title or "MERRILY",
        "body": body,
        "icon": icon or DEFAULT_ICON,
        "badge": icon or DEFAULT_ICON,
        "tag": tag or PUSH_TAG,
        "data": {"url": url or DEFAULT_LINK},
    }


def save_subscription(*, user_id: str, subscription: dict) -> PushSubscription:
    if not isinstance(subscription, dict):
        raise ValidationError("Invalid subscription payload")
    endpoint = subscription.get("endpoint")
    keys = subscription.get("keys") or {}
    if not endpoint or not keys.get("p256dh") or not keys.get("auth"):
        raise ValidationError("endpoint, keys.p256dh and keys.auth are required")

    existing = (
        db.session.query(PushSubscription)
        .filter_by(user_id=user_id, endpoint=endpoint)
        .first()
    )
    if existing is None:
        existing = PushSubscription(user_id=user_id, endpoint=endpoint)
        db.session.add(existing)
    existing.p256dh = keys["p256dh"]
    existing.auth = keys["auth"]
    db.session.commit()
    return existing


def delete_subscription(*, user_id: str, endpoint: str) -> int:
    if not endpoint:
        raise ValidationError("endpoint is required")
    deleted = (
        db.session.query(PushSubscription)
        .filter_by(user_id=user_id, endpoint=endpoint)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return deleted
