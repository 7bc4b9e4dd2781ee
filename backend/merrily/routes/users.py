# Overview: Flask API routes for member administration and the caller's own profile.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import user_service
from ..platform import PlatformError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth, require_admin

users_bp = Blueprint("users", __name__, url_prefix="/api")


def _platform_failure(e: PlatformError):
    return jsonify({"error": str(e)}), e.status_code or 502


@users_bp.get("/admin/users")
@require_auth
@require_admin
def list_users_route():
    try:
        users = user_service.list_auth_users()
    except PlatformError as e:
        current_app.logger.warning("Listing auth users failed: %s", e)
        return _platform_failure(e)
    return jsonify({"users": users})


@users_bp.put("/admin/users/<user_id>")
@require_auth
@require_admin
def update_user_route(user_id: str):
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.update_auth_user(
            user_id,
            full_name=data.get("full_name"),
            departments=data.get("departments"),
            is_admin=bool(data.get("is_admin")),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PlatformError as e:
        current_app.logger.warning("Updating auth user %s failed: %s", user_id, e)
        return _platform_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info("Admin %s updated user %s", g.current_user.id, user_id)
    return jsonify({"success": True, "user": user})


@users_bp.delete("/users/<user_id>")
@require_auth
@require_admin
def delete_user_route(user_id: str):
    try:
        result = user_service.delete_user(actor_id=g.current_user.id, user_id=user_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PlatformError as e:
        current_app.logger.warning("Deleting auth user %s failed: %s", user_id, e)
        return _platform_failure(e)
    except Exception:
        current_app.logger.exception("Failed to delete user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info("Admin %s deleted user %s", g.current_user.id, user_id)
    return jsonify(result)


@users_bp.get("/users/profile")
@require_auth
def get_profile_route():
    return jsonify(g.profile.to_dict())


@users_bp.patch("/users/profile")
@require_auth
def update_profile_route():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        profile = user_service.update_own_profile(g.profile, data)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(profile.to_dict())
