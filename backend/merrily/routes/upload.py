# Overview: Flask API route for editor image uploads to object storage.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import storage_service
from ..platform import PlatformError
from ..validation import ValidationError
from ..decorators import require_auth

upload_bp = Blueprint("upload", __name__, url_prefix="/api/upload")


@upload_bp.post("")
@require_auth
def upload_route():
    """Multipart field 'file'. Returns {success, url, file_name}."""
    file = request.files.get("file")
    if file is None:
        return jsonify({"error": "No file provided"}), 400

    content = file.read()
    try:
        result = storage_service.upload_blog_image(
            file_name=file.filename or "file",
            content=content,
            content_type=file.mimetype,
            access_token=g.access_token,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PlatformError as e:
        current_app.logger.warning("Image upload failed: %s", e)
        return jsonify({"error": str(e)}), e.status_code or 502
    except Exception:
        current_app.logger.exception("Failed to upload image")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result)
