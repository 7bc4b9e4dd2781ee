# Overview: Flask API routes for product collections; parses input and returns JSON responses.

# backend/merrily/routes/collections.py
"""
Product collection routes.

Query params on GET /api/collections:
- include_products: embed each collection's live products
- active_only: only collections whose window covers today (shop timezone)
- target_date: only collections whose window covers YYYY-MM-DD
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import collection_service
from ..validation import ValidationError, NotFoundError, optional_date, truthy_arg
from ..decorators import require_auth
from merrily.time_utils import local_today

collections_bp = Blueprint("collections", __name__, url_prefix="/api/collections")


@collections_bp.get("")
def list_collections_route():
    include_products = truthy_arg(request.args.get("include_products"))
    try:
        on_date = optional_date(request.args.get("target_date"), "target_date")
        if on_date is None and truthy_arg(request.args.get("active_only")):
            on_date = local_today()
        collections = collection_service.list_collections(on_date=on_date)
        return jsonify([c.to_dict(include_products=include_products) for c in collections])
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to list collections")
        return jsonify({"error": "Internal server error"}), 500


@collections_bp.post("")
@require_auth
def create_collection_route():
    payload = request.get_json(silent=True) or {}
    try:
        collection = collection_service.create_collection(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create collection")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(collection.to_dict()), 201


@collections_bp.put("/<int:collection_id>")
@require_auth
def update_collection_route(collection_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        collection = collection_service.update_collection(collection_id, payload)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(collection.to_dict())


@collections_bp.patch("/<int:collection_id>")
@require_auth
def update_window_route(collection_id: int):
    """Only start_date / end_date are applied."""
    payload = request.get_json(silent=True) or {}
    try:
        collection = collection_service.update_sales_window(collection_id, payload)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(collection.to_dict())


@collections_bp.delete("/<int:collection_id>")
@require_auth
def delete_collection_route(collection_id: int):
    try:
        collection_service.delete_collection(collection_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Collection deleted"})


@collections_bp.get("/<int:collection_id>/products")
def list_collection_products_route(collection_id: int):
    try:
        collection = collection_service.get_collection(collection_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    products = [p.to_dict() for p in collection.active_products()]
    return jsonify({"collection_id": collection.id, "products": products, "count": len(products)})


@collections_bp.post("/<int:collection_id>/products")
@require_auth
def add_collection_product_route(collection_id: int):
    data = request.get_json(silent=True) or {}
    if data.get("product_id") is None:
        return jsonify({"error": "product_id is required"}), 400
    try:
        link = collection_service.add_product(collection_id, data["product_id"])
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "message": "Product added to collection",
        "collection_id": link.collection_id,
        "product_id": link.product_id,
    }), 201


@collections_bp.delete("/<int:collection_id>/products/<int:product_id>")
@require_auth
def remove_collection_product_route(collection_id: int, product_id: int):
    try:
        collection_service.remove_product(collection_id, product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Product removed from collection"})
