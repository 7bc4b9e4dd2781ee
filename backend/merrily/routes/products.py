# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/merrily/routes/products.py
"""
Product management routes.

Reads are public (the sales-entry screen loads them before sign-in);
writes require authentication. Deletes are soft.
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import catalog_service
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    try:
        products = catalog_service.list_products()
        return jsonify([p.to_dict() for p in products])
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        return jsonify(catalog_service.get_product(product_id).to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@products_bp.post("")
@require_auth
def create_product_route():
    payload = request.get_json(silent=True) or {}
    try:
        product = catalog_service.create_product(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Product created", "product_id": product.id}), 201


def _update(product_id: int, partial: bool):
    payload = request.get_json(silent=True) or {}
    try:
        product = catalog_service.update_product(product_id, payload, partial=partial)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Product updated", "product": product.to_dict()})


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    return _update(product_id, partial=False)


@products_bp.patch("/<int:product_id>")
@require_auth
def patch_product_route(product_id: int):
    return _update(product_id, partial=True)


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        catalog_service.delete_product(product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Product deleted"})
