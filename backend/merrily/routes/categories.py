# Overview: Flask API routes for product categories; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import catalog_service
from ..validation import ValidationError, ConflictError, NotFoundError
from ..decorators import require_auth

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
def list_categories_route():
    try:
        return jsonify([c.to_dict() for c in catalog_service.list_categories()])
    except Exception:
        current_app.logger.exception("Failed to list categories")
        return jsonify({"error": "Internal server error"}), 500


@categories_bp.post("")
@require_auth
def create_category_route():
    payload = request.get_json(silent=True) or {}
    try:
        category = catalog_service.create_category(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create category")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Category created", "category_id": category.id}), 201


@categories_bp.put("/<int:category_id>")
@require_auth
def update_category_route(category_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        category = catalog_service.update_category(category_id, payload)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "Category updated", "category": category.to_dict()})


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    try:
        catalog_service.delete_category(category_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"message": "Category deleted"})
