# Overview: Flask API routes for post likes; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import social_service
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth

likes_bp = Blueprint("likes", __name__, url_prefix="/api/likes")


@likes_bp.post("")
@require_auth
def toggle_like_route():
    data = request.get_json(silent=True) or {}
    if not data.get("post_id"):
        return jsonify({"error": "post_id is required"}), 400
    try:
        liked = social_service.toggle_like(user_id=g.current_user.id, post_id=data["post_id"])
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to toggle like")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"liked": liked})


@likes_bp.get("")
@require_auth
def list_likes_route():
    post_id = request.args.get("post_id")
    if not post_id:
        return jsonify({"error": "post_id is required"}), 400
    try:
        likes = social_service.list_likes(post_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify([like.to_dict() for like in likes])
