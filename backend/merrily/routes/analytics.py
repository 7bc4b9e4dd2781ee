# Overview: Flask API routes for sales analytics; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import analytics_service
from ..services.analytics_service import AnalyticsError
from ..validation import ValidationError, optional_date

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("/sales")
def sales_overview_route():
    try:
        return jsonify(analytics_service.sales_overview())
    except Exception:
        current_app.logger.exception("Failed to build sales overview")
        return jsonify({"error": "Internal server error"}), 500


@analytics_bp.get("/charts")
def chart_route():
    """
    Query params:
    - type: daily_trend | monthly_comparison | product_ranking | category_breakdown
            | hourly_sales | weekday_sales | target_achievement
    - start_date, end_date: YYYY-MM-DD (optional)
    - year: int (monthly_comparison, target_achievement)
    """
    try:
        start = optional_date(request.args.get("start_date"), "start_date")
        end = optional_date(request.args.get("end_date"), "end_date")
        year = request.args.get("year", type=int)
        return jsonify(analytics_service.chart(request.args.get("type"), start=start, end=end, year=year))
    except (AnalyticsError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to build chart %s", request.args.get("type"))
        return jsonify({"error": "Internal server error"}), 500
