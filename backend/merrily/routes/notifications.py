# Overview: Flask API routes for in-app notifications; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import notification_service
from ..validation import NotFoundError, truthy_arg
from ..decorators import require_auth, require_admin

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")

MAX_LIMIT = 200


@notifications_bp.get("")
@require_auth
def list_notifications_route():
    limit = request.args.get("limit", default=50, type=int)
    rows = notification_service.list_for_user(
        g.current_user.id,
        unread_only=truthy_arg(request.args.get("unread_only")),
        limit=min(max(limit, 1), MAX_LIMIT),
    )
    return jsonify([n.to_dict() for n in rows])


@notifications_bp.get("/unread-count")
@require_auth
def unread_count_route():
    return jsonify({"count": notification_service.unread_count(g.current_user.id)})


@notifications_bp.post("")
@require_auth
@require_admin
def create_notification_route():
    """Targeted when user_id is given; otherwise a broadcast row. The response carries the push payload."""
    data = request.get_json(silent=True) or {}
    title = str(data.get("title") or "").strip()
    if not title:
        return jsonify({"error": "title is required"}), 400

    try:
        if data.get("user_id"):
            notification = notification_service.notify_user(
                user_id=str(data["user_id"]),
                type=data.get("type") or notification_service.TYPE_ANNOUNCEMENT,
                title=title,
                message=data.get("message") or "",
                link=data.get("link"),
                data=data.get("data") if isinstance(data.get("data"), dict) else None,
            )
        else:
            notification = notification_service.broadcast(
                type=data.get("type") or notification_service.TYPE_ANNOUNCEMENT,
                title=title,
                message=data.get("message") or "",
                link=data.get("link"),
            )
    except Exception:
        current_app.logger.exception("Failed to create notification")
        return jsonify({"error": "Internal server error"}), 500

    # Same shape the service worker's push handler reads
    push = notification_service.build_push_payload(
        title=notification.title,
        body=notification.message or "",
        url=notification.link,
    )
    return jsonify({**notification.to_dict(), "push": push}), 201


@notifications_bp.patch("/<int:notification_id>/read")
@require_auth
def mark_read_route(notification_id: int):
    try:
        notification = notification_service.mark_read(notification_id=notification_id, user_id=g.current_user.id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(notification.to_dict())


@notifications_bp.post("/read-all")
@require_auth
def mark_all_read_route():
    updated = notification_service.mark_all_read(g.current_user.id)
    return jsonify({"success": True, "updated": updated})
