# Overview: Service-layer operations for sales targets, expenses, budgets and spreadsheet exports.

from __future__ import annotations

import io
from datetime import date

from openpyxl import Workbook

from ..extensions import db
from ..models import (
    SalesTarget,
    ExpenseCategory,
    Expense,
    Budget,
    DailySalesSummary,
    ProductSalesSummary,
)
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_amounts,
    enforce_year_month,
    ValidationError,
    NotFoundError,
)
from merrily.time_utils import local_today, utcnow

EXPENSE_CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "display_order"},
    required_on_create={"name"},
    ignore_unknown=True,
)
EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={
        "expense_date", "category_id", "amount", "description", "vendor_name", "payment_method", "status",
    },
    required_on_create={"expense_date", "amount"},
    ignore_unknown=True,
)
EXPENSE_STATUSES = ("paid", "pending")


class ExportError(ValueError):
    """Raised for unsupported export requests."""
    pass


def _amount(value, name: str) -> int:
    if value in (None, ""):
        return 0
    try:
        amount = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")
    enforce_amounts({name: amount}, name)
    return amount


# ---------------------------------------------------------------------------
# Sales targets
# ---------------------------------------------------------------------------

def list_targets(*, year: int | None = None, month: int | None = None) -> list[SalesTarget]:
    query = db.session.query(SalesTarget)
    if year:
        query = query.filter(SalesTarget.year == year)
    if month:
        query = query.filter(SalesTarget.month == month)
    return query.order_by(SalesTarget.year.desc(), SalesTarget.month.desc()).all()


def upsert_target(payload: dict) -> SalesTarget:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    if not payload.get("year") or not payload.get("month"):
        raise ValidationError("year and month are required")
    year, month = enforce_year_month(payload["year"], payload["month"])

    target = db.session.query(SalesTarget).filter_by(year=year, month=month).first()
    if target is None:
        target = SalesTarget(year=year, month=month)
        db.session.add(target)
    target.target_amount = _amount(payload.get("target_amount"), "target_amount")
    target.target_customers = _amount(payload.get("target_customers"), "target_customers")
    target.notes = payload.get("notes")
    db.session.commit()
    return target


def delete_target(target_id: int) -> None:
    target = db.session.get(SalesTarget, target_id)
    if target is None:
        raise NotFoundError("Sales target not found")
    db.session.delete(target)
    db.session.commit()


# ---------------------------------------------------------------------------
# Expense categories and expenses
# ---------------------------------------------------------------------------

def list_expense_categories() -> list[ExpenseCategory]:
    return ExpenseCategory.active().order_by(ExpenseCategory.display_order.asc(), ExpenseCategory.id.asc()).all()


def create_expense_category(payload: dict) -> ExpenseCategory:
    patch = validate_payload(model=ExpenseCategory, payload=payload, policy=EXPENSE_CATEGORY_POLICY, partial=False)
    if patch.get("display_order") is None:
        patch["display_order"] = 0
    category = ExpenseCategory(**patch)
    db.session.add(category)
    db.session.commit()
    return category


def delete_expense_category(category_id: int) -> None:
    category = ExpenseCategory.active().filter(ExpenseCategory.id == category_id).first()
    if category is None:
        raise NotFoundError("Expense category not found")
    category.deleted_at = utcnow()
    db.session.commit()


def _check_expense_patch(patch: dict) -> None:
    enforce_amounts(patch, "amount")
    if patch.get("status") and patch["status"] not in EXPENSE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(EXPENSE_STATUSES)}")
    if patch.get("category_id") is not None:
        exists = ExpenseCategory.active().filter(ExpenseCategory.id == patch["category_id"]).first()
        if exists is None:
            raise ValidationError("category_id does not reference an existing expense category")


def list_expenses(
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    category_id: int | None = None,
) -> list[Expense]:
    query = Expense.active()
    if start_date:
        query = query.filter(Expense.expense_date >= start_date)
    if end_date:
        query = query.filter(Expense.expense_date <= end_date)
    if category_id:
        query = query.filter(Expense.category_id == category_id)
    return query.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()


def create_expense(payload: dict, *, created_by: str | None) -> Expense:
    patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
    _check_expense_patch(patch)
    expense = Expense(created_by=created_by, **patch)
    db.session.add(expense)
    db.session.commit()
    return expense


def update_expense(expense_id: int, payload: dict) -> Expense:
    expense = Expense.active().filter(Expense.id == expense_id).first()
    if expense is None:
        raise NotFoundError("Expense not found")
    patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=True)
    _check_expense_patch(patch)
    for k, v in patch.items():
        setattr(expense, k, v)
    db.session.commit()
    return expense


def delete_expense(expense_id: int) -> None:
    expense = Expense.active().filter(Expense.id == expense_id).first()
    if expense is None:
        raise NotFoundError("Expense not found")
    expense.deleted_at = utcnow()
    db.session.commit()


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------

def list_budgets(*, year: int | None = None, month: int | None = None) -> list[Budget]:
    query = db.session.query(Budget)
    if year:
        query = query.filter(Budget.year == year)
    if month:
        query = query.filter(Budget.month == month)
    return query.order_by(Budget.year.desc(), Budget.month.desc(), Budget.category.asc()).all()


def _upsert_budget(item: dict, *, created_by: str | None, with_actual: bool) -> Budget:
    if not isinstance(item, dict):
        raise ValidationError("Each budget must be an object")
    category = (item.get("category") or "").strip() if isinstance(item.get("category"), str) else ""
    if not item.get("year") or not item.get("month") or not category:
        raise ValidationError("year, month and category are required")
    year, month = enforce_year_month(item["year"], item["month"])

    budget = db.session.query(Budget).filter_by(year=year, month=month, category=category).first()
    if budget is None:
        budget = Budget(year=year, month=month, category=category, created_by=created_by)
        db.session.add(budget)
    budget.planned_amount = _amount(item.get("planned_amount"), "planned_amount")
    if with_actual:
        budget.actual_amount = _amount(item.get("actual_amount"), "actual_amount")
    budget.notes = item.get("notes")
    return budget


def upsert_budget(payload: dict, *, created_by: str | None) -> Budget:
    budget = _upsert_budget(payload, created_by=created_by, with_actual=False)
    db.session.commit()
    return budget


def bulk_upsert_budgets(items, *, created_by: str | None) -> list[Budget]:
    """All-or-nothing: one bad row rolls back the whole batch."""
    if not isinstance(items, list) or not items:
        raise ValidationError("budgets must be a non-empty list")
    try:
        # Autoflush lets a repeated (year, month, category) in one batch hit the pending row
        budgets = [_upsert_budget(item, created_by=created_by, with_actual=True) for item in items]
    except ValidationError:
        db.session.rollback()
        raise
    db.session.commit()
    return budgets


def delete_budget(budget_id: int) -> None:
    budget = db.session.get(Budget, budget_id)
    if budget is None:
        raise NotFoundError("Budget not found")
    db.session.delete(budget)
    db.session.commit()


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

def _month_bounds(year: int, month: int) -> tuple[date, date]:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def _range_label(start: date | None, end: date | None) -> str:
    return f"{start.isoformat() if start else 'all'}_{end.isoformat() if end else 'all'}"


def _export_daily_sales(start, end, year, month) -> dict:
    query = db.session.query(DailySalesSummary)
    if start:
        query = query.filter(DailySalesSummary.sale_date >= start)
    if end:
        query = query.filter(DailySalesSummary.sale_date <= end)
    rows = query.order_by(DailySalesSummary.sale_date.asc()).all()
    return {
        "filename": f"daily_sales_{_range_label(start, end)}.xlsx",
        "headers": ["Date", "Total sales", "Total cost", "Gross profit", "Gross margin (%)", "Items sold"],
        "data": [
            [r.sale_date.isoformat(), r.total_sales, r.total_cost, r.gross_profit, r.gross_margin, r.item_count]
            for r in rows
        ],
    }


def _export_product_sales(start, end, year, month) -> dict:
    query = db.session.query(ProductSalesSummary)
    if start:
        query = query.filter(ProductSalesSummary.sale_date >= start)
    if end:
        query = query.filter(ProductSalesSummary.sale_date <= end)
    rows = query.order_by(ProductSalesSummary.sale_date.asc(), ProductSalesSummary.id.asc()).all()
    return {
        "filename": f"product_sales_{_range_label(start, end)}.xlsx",
        "headers": ["Date", "Product", "Quantity", "Sales", "Cost"],
        "data": [
            [
                r.sale_date.isoformat(),
                r.product.name if r.product else "Unknown",
                r.quantity_sold,
                r.total_sales,
                r.total_cost,
            ]
            for r in rows
        ],
    }


def _export_expenses(start, end, year, month) -> dict:
    rows = list_expenses(start_date=start, end_date=end)
    rows.sort(key=lambda e: (e.expense_date, e.id))
    return {
        "filename": f"expenses_{_range_label(start, end)}.xlsx",
        "headers": ["Date", "Category", "Amount", "Description", "Vendor", "Payment method", "Status"],
        "data": [
            [
                e.expense_date.isoformat(),
                e.category.name if e.category else "Uncategorized",
                e.amount,
                e.description or "",
                e.vendor_name or "",
                e.payment_method,
                e.status,
            ]
            for e in rows
        ],
    }


def _export_budget_vs_actual(start, end, year, month) -> dict:
    target_year = year or local_today().year
    rows = (
        db.session.query(Budget)
        .filter(Budget.year == target_year)
        .order_by(Budget.month.asc(), Budget.category.asc())
        .all()
    )
    return {
        "filename": f"budget_vs_actual_{target_year}.xlsx",
        "headers": ["Year", "Month", "Category", "Planned", "Actual", "Variance"],
        "data": [
            [b.year, b.month, b.category, b.planned_amount, b.actual_amount, b.actual_amount - b.planned_amount]
            for b in rows
        ],
    }


def _export_monthly_report(start, end, year, month) -> dict:
    today = local_today()
    target_year, target_month = enforce_year_month(year or today.year, month or today.month)
    month_start, month_end = _month_bounds(target_year, target_month)

    days = (
        db.session.query(DailySalesSummary)
        .filter(DailySalesSummary.sale_date >= month_start, DailySalesSummary.sale_date < month_end)
        .all()
    )
    expenses = (
        Expense.active()
        .filter(Expense.expense_date >= month_start, Expense.expense_date < month_end)
        .all()
    )
    target = db.session.query(SalesTarget).filter_by(year=target_year, month=target_month).first()

    total_sales = sum(d.total_sales for d in days)
    total_cost = sum(d.total_cost for d in days)
    total_expenses = sum(e.amount for e in expenses)
    gross_profit = total_sales - total_cost
    target_amount = target.target_amount if target else 0

    return {
        "filename": f"monthly_report_{target_year}_{target_month:02d}.xlsx",
        "headers": ["Item", "Amount"],
        "data": [
            ["Sales", total_sales],
            ["Cost of sales", total_cost],
            ["Gross profit", gross_profit],
            ["Gross margin (%)", round(gross_profit / total_sales * 100, 2) if total_sales > 0 else 0],
            ["Expenses", total_expenses],
            ["Operating profit", gross_profit - total_expenses],
            ["Sales target", target_amount],
            ["Achievement (%)", round(total_sales / target_amount * 100, 2) if target_amount > 0 else 0],
        ],
    }


EXPORTS = {
    "daily_sales": _export_daily_sales,
    "product_sales": _export_product_sales,
    "expenses": _export_expenses,
    "budget_vs_actual": _export_budget_vs_actual,
    "monthly_report": _export_monthly_report,
}


def build_export(
    export_type: str | None,
    *,
    start: date | None = None,
    end: date | None = None,
    year: int | None = None,
    month: int | None = None,
) -> dict:
    if export_type not in EXPORTS:
        raise ExportError(f"type must be one of: {', '.join(EXPORTS)}")
    return EXPORTS[export_type](start, end, year, month)


def export_to_xlsx(export: dict) -> bytes:
    wb = Workbook()
    sheet = wb.active
    sheet.title = "Export"
    sheet.append(export["headers"])
    for row in export["data"]:
        sheet.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
