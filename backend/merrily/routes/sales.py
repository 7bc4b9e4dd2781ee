# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/merrily/routes/sales.py
"""
Sales routes.

Register transactions:
- POST /api/sales            record one sale with items (auth; entered_by = caller)
- GET  /api/sales            recent sales, newest first
- GET/DELETE /api/sales/<id>

Daily batch entry (per-product day totals):
- POST/GET/DELETE /api/sales/daily
- GET /api/sales/product-summary

Sales-entry helper:
- GET /api/sales/collections?sale_date=YYYY-MM-DD
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import sales_service, collection_service
from ..validation import ValidationError, NotFoundError, optional_date
from ..decorators import require_auth

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def create_sale_route():
    payload = request.get_json(silent=True) or {}
    try:
        sale = sales_service.record_sale(payload=payload, entered_by=g.current_user.id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": sale.to_dict()}), 201


@sales_bp.get("")
def list_sales_route():
    try:
        start_date = optional_date(request.args.get("start_date"), "start_date")
        end_date = optional_date(request.args.get("end_date"), "end_date")
        limit = request.args.get("limit", type=int)
        sales = sales_service.list_sales(start_date=start_date, end_date=end_date, limit=limit)
        return jsonify({"recent_sales": [s.to_dict() for s in sales]})
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    try:
        return jsonify(sales_service.get_sale(sale_id).to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@sales_bp.delete("/<int:sale_id>")
@require_auth
def delete_sale_route(sale_id: int):
    try:
        sales_service.delete_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    current_app.logger.info("Sale %s deleted by user=%s", sale_id, g.current_user.id)
    return jsonify({"message": "Sale deleted"})


@sales_bp.get("/collections")
def collections_for_date_route():
    raw = request.args.get("sale_date")
    if not raw:
        return jsonify({"error": "sale_date is required"}), 400
    try:
        sale_date = optional_date(raw, "sale_date")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    collections = collection_service.list_collections(on_date=sale_date)
    return jsonify([c.to_dict(include_products=True) for c in collections])


@sales_bp.post("/daily")
@require_auth
def record_daily_route():
    data = request.get_json(silent=True) or {}
    if not data.get("sale_date") or not isinstance(data.get("sales_data"), list):
        return jsonify({"error": "sale_date and sales_data are required"}), 400
    try:
        summary = sales_service.record_daily_batch(sale_date=data["sale_date"], sales_data=data["sales_data"])
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record daily sales")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Sales recorded", "summary": summary}), 201


@sales_bp.get("/daily")
def list_daily_route():
    try:
        start_date = optional_date(request.args.get("start_date"), "start_date")
        end_date = optional_date(request.args.get("end_date"), "end_date")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    rows = sales_service.list_daily_summaries(start_date=start_date, end_date=end_date)
    return jsonify([r.to_dict() for r in rows])


@sales_bp.get("/product-summary")
def list_product_summary_route():
    try:
        sale_date = optional_date(request.args.get("sale_date"), "sale_date")
        start_date = optional_date(request.args.get("start_date"), "start_date")
        end_date = optional_date(request.args.get("end_date"), "end_date")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    rows = sales_service.list_product_summaries(sale_date=sale_date, start_date=start_date, end_date=end_date)
    return jsonify([r.to_dict() for r in rows])


@sales_bp.delete("/daily")
@require_auth
def delete_daily_route():
    sale_date = request.args.get("sale_date")
    if not sale_date:
        return jsonify({"error": "sale_date is required"}), 400
    try:
        result = sales_service.delete_daily(sale_date)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "Deleted", **result})
