# Overview: Flask API routes for sales targets, expenses, budgets and exports; parses input and returns JSON responses.

# backend/merrily/routes/finance.py
"""
Accounting routes.

- /api/sales-targets        monthly sales targets (upsert on year+month)
- /api/expense-categories   expense categories (soft delete)
- /api/expenses             expenses (soft delete)
- /api/budgets              monthly budgets per category (upsert, bulk upsert)
- /api/exports              spreadsheet rows; format=xlsx returns a workbook
"""
from flask import Blueprint, request, jsonify, current_app, g, Response

from ..services import finance_service
from ..services.finance_service import ExportError
from ..validation import ValidationError, NotFoundError, optional_date
from ..decorators import require_auth

finance_bp = Blueprint("finance", __name__, url_prefix="/api")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ---------------------------------------------------------------------------
# Sales targets
# ---------------------------------------------------------------------------

@finance_bp.get("/sales-targets")
def list_targets_route():
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    return jsonify([t.to_dict() for t in finance_service.list_targets(year=year, month=month)])


@finance_bp.post("/sales-targets")
@require_auth
def upsert_target_route():
    payload = request.get_json(silent=True) or {}
    try:
        target = finance_service.upsert_target(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to save sales target")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(target.to_dict()), 201


@finance_bp.delete("/sales-targets/<int:target_id>")
@require_auth
def delete_target_route(target_id: int):
    try:
        finance_service.delete_target(target_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Deleted"})


# ---------------------------------------------------------------------------
# Expense categories
# ---------------------------------------------------------------------------

@finance_bp.get("/expense-categories")
def list_expense_categories_route():
    return jsonify([c.to_dict() for c in finance_service.list_expense_categories()])


@finance_bp.post("/expense-categories")
@require_auth
def create_expense_category_route():
    payload = request.get_json(silent=True) or {}
    try:
        category = finance_service.create_expense_category(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(category.to_dict()), 201


@finance_bp.delete("/expense-categories/<int:category_id>")
@require_auth
def delete_expense_category_route(category_id: int):
    try:
        finance_service.delete_expense_category(category_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Deleted"})


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

@finance_bp.get("/expenses")
def list_expenses_route():
    try:
        start_date = optional_date(request.args.get("start_date"), "start_date")
        end_date = optional_date(request.args.get("end_date"), "end_date")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    expenses = finance_service.list_expenses(
        start_date=start_date,
        end_date=end_date,
        category_id=request.args.get("category_id", type=int),
    )
    return jsonify([e.to_dict() for e in expenses])


@finance_bp.post("/expenses")
@require_auth
def create_expense_route():
    payload = request.get_json(silent=True) or {}
    try:
        expense = finance_service.create_expense(payload, created_by=g.current_user.id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create expense")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(expense.to_dict()), 201


@finance_bp.put("/expenses/<int:expense_id>")
@require_auth
def update_expense_route(expense_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        expense = finance_service.update_expense(expense_id, payload)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(expense.to_dict())


@finance_bp.delete("/expenses/<int:expense_id>")
@require_auth
def delete_expense_route(expense_id: int):
    try:
        finance_service.delete_expense(expense_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Deleted"})


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------

@finance_bp.get("/budgets")
def list_budgets_route():
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    return jsonify([b.to_dict() for b in finance_service.list_budgets(year=year, month=month)])


@finance_bp.post("/budgets")
@require_auth
def upsert_budget_route():
    payload = request.get_json(silent=True) or {}
    try:
        budget = finance_service.upsert_budget(payload, created_by=g.current_user.id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(budget.to_dict()), 201


@finance_bp.put("/budgets")
@require_auth
def bulk_upsert_budgets_route():
    data = request.get_json(silent=True) or {}
    try:
        budgets = finance_service.bulk_upsert_budgets(data.get("budgets"), created_by=g.current_user.id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to bulk update budgets")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify([b.to_dict() for b in budgets])


@finance_bp.delete("/budgets/<int:budget_id>")
@require_auth
def delete_budget_route(budget_id: int):
    try:
        finance_service.delete_budget(budget_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"message": "Deleted"})


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

@finance_bp.get("/exports")
@require_auth
def export_route():
    try:
        export = finance_service.build_export(
            request.args.get("type"),
            start=optional_date(request.args.get("start_date"), "start_date"),
            end=optional_date(request.args.get("end_date"), "end_date"),
            year=request.args.get("year", type=int),
            month=request.args.get("month", type=int),
        )
    except (ExportError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to build export %s", request.args.get("type"))
        return jsonify({"error": "Internal server error"}), 500

    if request.args.get("format") == "xlsx":
        return Response(
            finance_service.export_to_xlsx(export),
            mimetype=XLSX_MIMETYPE,
            headers={"Content-Disposition": f'attachment; filename="{export["filename"]}"'},
        )
    return jsonify(export)
