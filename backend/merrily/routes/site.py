# Overview: Flask API routes for the public site config and its rendered theme stylesheet.

from flask import Blueprint, Response, request, jsonify, current_app, g

from ..services import site_service, theme_service
from ..validation import ValidationError
from ..decorators import require_auth

site_bp = Blueprint("site", __name__)


@site_bp.get("/api/pr/website")
def get_site_route():
    return jsonify(site_service.get_site_payload())


@site_bp.route("/api/pr/website", methods=["PUT", "POST"])
@require_auth
def save_site_route():
    data = request.get_json(silent=True) or {}
    updated_by = data.get("updated_by") or g.current_user.id
    try:
        payload = site_service.save_site_payload(data.get("payload"), updated_by=updated_by)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to save site config")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"success": True, "payload": payload})


@site_bp.get("/theme.css")
def theme_css_route():
    css = theme_service.render_theme_css(site_service.get_site_payload())
    response = Response(css, mimetype="text/css")
    response.headers["Cache-Control"] = "no-cache"
    return response
