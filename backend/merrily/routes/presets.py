# Overview: Flask API routes for UI layout presets; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import site_service
from ..validation import ValidationError, NotFoundError, PermissionDeniedError
from ..decorators import require_auth

presets_bp = Blueprint("presets", __name__, url_prefix="/api/presets")


@presets_bp.get("")
def list_presets_route():
    return jsonify([p.to_dict() for p in site_service.list_presets()])


@presets_bp.post("")
@require_auth
def create_preset_route():
    data = request.get_json(silent=True)
    try:
        preset = site_service.create_preset(data)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create preset")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(preset.to_dict()), 201


@presets_bp.put("/<int:preset_id>")
@require_auth
def update_preset_route(preset_id: int):
    data = request.get_json(silent=True)
    try:
        preset = site_service.update_preset(preset_id, data)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PermissionDeniedError as e:
        return jsonify({"error": str(e)}), 403

    return jsonify(preset.to_dict())


@presets_bp.delete("/<int:preset_id>")
@require_auth
def delete_preset_route(preset_id: int):
    try:
        site_service.delete_preset(preset_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PermissionDeniedError as e:
        return jsonify({"error": str(e)}), 403

    return jsonify({"success": True})
