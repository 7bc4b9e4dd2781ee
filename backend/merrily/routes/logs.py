# Overview: Flask API routes for the activity log feed.

from flask import Blueprint, request, jsonify, current_app

from ..services import activity_service

logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("")
def list_logs_route():
    return jsonify([entry.to_dict() for entry in activity_service.recent_entries()])


@logs_bp.post("")
def create_log_route():
    data = request.get_json(silent=True) or {}
    message = str(data.get("message") or "").strip()
    if not message:
        return jsonify({"error": "message is required"}), 400
    try:
        entry = activity_service.create_entry(
            message=message,
            user_name=data.get("user_name"),
            user_id=data.get("user_id"),
        )
    except Exception:
        current_app.logger.exception("Failed to write activity log")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(entry.to_dict()), 201
