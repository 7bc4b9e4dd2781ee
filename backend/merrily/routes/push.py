# Overview: Flask API routes for web-push subscriptions and the service worker script.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import notification_service
from ..validation import ValidationError
from ..decorators import require_auth

push_bp = Blueprint("push", __name__)


@push_bp.post("/api/push-subscribe")
@require_auth
def subscribe_route():
    """Body is the browser PushSubscription JSON: {endpoint, keys: {p256dh, auth}}."""
    data = request.get_json(silent=True)
    subscription = data.get("subscription", data) if isinstance(data, dict) else data
    try:
        sub = notification_service.save_subscription(user_id=g.current_user.id, subscription=subscription)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to save push subscription")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"success": True, "subscription": sub.to_dict()})


@push_bp.delete("/api/push-subscribe")
@require_auth
def unsubscribe_route():
    data = request.get_json(silent=True) or {}
    try:
        deleted = notification_service.delete_subscription(user_id=g.current_user.id, endpoint=data.get("endpoint"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"success": True, "deleted": deleted})


@push_bp.get("/sw.js")
def service_worker_route():
    response = current_app.send_static_file("sw.js")
    response.headers["Content-Type"] = "application/javascript"
    # The worker must be allowed to control the whole origin
    response.headers["Service-Worker-Allowed"] = "/"
    response.headers["Cache-Control"] = "no-cache"
    return response
