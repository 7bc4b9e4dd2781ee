# Overview: Flask API routes for the browser auth bridge; parses input and returns JSON responses.

# backend/merrily/routes/auth.py
"""
Auth bridge routes.

The browser authenticates directly with the hosted platform and then posts
each auth state change here so the session also lives in HttpOnly cookies.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service, session_service
from ..services.session_service import SessionError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/callback")
def auth_callback_route():
    data = request.get_json(silent=True) or {}
    event = data.get("event")
    if not event:
        return jsonify({"error": "event is required"}), 400

    response = jsonify({"success": True})
    try:
        session_service.apply_auth_event(response, event, data.get("session"))
    except SessionError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to apply auth event %s", event)
        return jsonify({"error": "Internal server error"}), 500

    return response


@auth_bp.get("/api/me")
@require_auth
def me_route():
    """Current user, profile and admin flag."""
    user = g.current_user
    return jsonify({
        "user": {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata,
        },
        "profile": g.profile.to_dict() if g.profile else None,
        "is_admin": auth_service.is_admin(user, g.profile),
    })
