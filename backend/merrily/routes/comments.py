# Overview: Flask API routes for post comments; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import social_service
from ..validation import ValidationError, NotFoundError, PermissionDeniedError
from ..decorators import require_auth

comments_bp = Blueprint("comments", __name__, url_prefix="/api/comments")


@comments_bp.get("")
@require_auth
def list_comments_route():
    post_id = request.args.get("post_id")
    if not post_id:
        return jsonify({"error": "post_id is required"}), 400
    try:
        comments = social_service.list_comments(post_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify([c.to_dict() for c in comments])


@comments_bp.post("")
@require_auth
def create_comment_route():
    data = request.get_json(silent=True) or {}
    if not data.get("post_id") or not data.get("content"):
        return jsonify({"error": "post_id and content are required"}), 400
    try:
        comment = social_service.create_comment(
            user_id=g.current_user.id,
            post_id=data["post_id"],
            content=data["content"],
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create comment")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(comment.to_dict()), 201


@comments_bp.put("/<int:comment_id>")
@require_auth
def update_comment_route(comment_id: int):
    data = request.get_json(silent=True) or {}
    try:
        comment = social_service.update_comment(
            comment_id=comment_id,
            user_id=g.current_user.id,
            content=data.get("content"),
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PermissionDeniedError as e:
        return jsonify({"error": str(e)}), 403
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(comment.to_dict())


@comments_bp.delete("/<int:comment_id>")
@require_auth
def delete_comment_route(comment_id: int):
    try:
        social_service.delete_comment(comment_id=comment_id, user_id=g.current_user.id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PermissionDeniedError as e:
        return jsonify({"error": str(e)}), 403

    return jsonify({"success": True})
