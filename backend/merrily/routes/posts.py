# Overview: Flask API routes for feed posts; parses input and returns JSON responses.

# backend/merrily/routes/posts.py
"""
Feed post routes.

POST accepts either multipart form data (title, content, images / images[])
or JSON (title, content, images: [url, ...]). Edits and deletes are limited
to the author.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import social_service
from ..validation import ValidationError, NotFoundError, PermissionDeniedError
from ..decorators import require_auth

posts_bp = Blueprint("posts", __name__, url_prefix="/api/posts")


def _uploaded_images() -> list[tuple]:
    files = request.files.getlist("images") + request.files.getlist("images[]")
    return [(f.filename or "", f.mimetype, f.read()) for f in files if f and f.filename]


@posts_bp.get("")
@require_auth
def list_posts_route():
    try:
        posts = social_service.list_posts()
        return jsonify([p.to_dict(viewer_id=g.current_user.id) for p in posts])
    except Exception:
        current_app.logger.exception("Failed to list posts")
        return jsonify({"error": "Internal server error"}), 500


@posts_bp.get("/<int:post_id>")
@require_auth
def get_post_route(post_id: int):
    try:
        post = social_service.get_post(post_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(post.to_dict(viewer_id=g.current_user.id))


@posts_bp.post("")
@require_auth
def create_post_route():
    if request.mimetype == "multipart/form-data":
        title = request.form.get("title")
        content = request.form.get("content")
        images = _uploaded_images()
        image_urls = None
    else:
        data = request.get_json(silent=True) or {}
        title = data.get("title")
        content = data.get("content")
        images = None
        image_urls = data.get("images") if isinstance(data.get("images"), list) else None

    try:
        post = social_service.create_post(
            user_id=g.current_user.id,
            title=title,
            content=content,
            images=images,
            image_urls=image_urls,
            access_token=g.access_token,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create post")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(post.to_dict(viewer_id=g.current_user.id)), 201


@posts_bp.put("/<int:post_id>")
@require_auth
def update_post_route(post_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        post = social_service.update_post(post_id=post_id, user_id=g.current_user.id, payload=payload)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PermissionDeniedError as e:
        return jsonify({"error": str(e)}), 403
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(post.to_dict(viewer_id=g.current_user.id))


@posts_bp.delete("/<int:post_id>")
@require_auth
def delete_post_route(post_id: int):
    try:
        social_service.delete_post(post_id=post_id, user_id=g.current_user.id, access_token=g.access_token)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PermissionDeniedError as e:
        return jsonify({"error": str(e)}), 403

    return jsonify({"success": True})
