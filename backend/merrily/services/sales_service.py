# Overview: Service-layer operations for register sales and daily batch entry.

"""
Sales Service

Two ways sales reach the database:
- record_sale: one register transaction with line items (the POS screen)
- record_daily_batch: per-product quantities for a whole day, written
  straight into product_sales_summary / daily_sales_summary

Line items snapshot unit_price at entry time; later product price edits
never rewrite recorded sales.
"""
from __future__ import annotations

from datetime import date

from ..extensions import db
from ..models import Sale, SaleItem, Product, DailySalesSummary, ProductSalesSummary
from ..models.sales import PAYMENT_METHODS
from ..validation import (
    enforce_amounts,
    require_int,
    ValidationError,
    NotFoundError,
    MAX_AMOUNT,
)
from merrily.time_utils import parse_iso_date, parse_clock_time, time_slot_for, utcnow

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 200


def _parse_date(value, name: str) -> date:
    try:
        d = parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")
    if d is None:
        raise ValidationError(f"{name} is required")
    return d


def _load_products(product_ids: set[int]) -> dict[int, Product]:
    if not product_ids:
        return {}
    rows = Product.active().filter(Product.id.in_(product_ids)).all()
    return {p.id: p for p in rows}


def record_sale(*, payload: dict, entered_by: str | None) -> Sale:
    """
    Create one sale with its items.

    payload: {sale_date, sale_time, payment_method, note?, items:[{product_id, quantity, unit_price?}]}
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    sale_date = _parse_date(payload.get("sale_date"), "sale_date")
    try:
        sale_time = parse_clock_time(payload.get("sale_time"))
    except ValueError:
        raise ValidationError("sale_time must be a time (HH:MM)")
    if sale_time is None:
        raise ValidationError("sale_time is required")

    payment_method = payload.get("payment_method") or "cash"
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")

    parsed = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        product_id = require_int(raw.get("product_id"), f"items[{index}].product_id")
        quantity = require_int(raw.get("quantity"), f"items[{index}].quantity")
        if quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be > 0")
        unit_price = raw.get("unit_price")
        if unit_price is not None:
            unit_price = require_int(unit_price, f"items[{index}].unit_price")
            enforce_amounts({"unit_price": unit_price}, "unit_price")
        parsed.append((product_id, quantity, unit_price))

    products = _load_products({pid for pid, _, _ in parsed})

    sale = Sale(
        sale_date=sale_date,
        sale_time=sale_time,
        time_slot=time_slot_for(sale_time),
        payment_method=payment_method,
        note=(payload.get("note") or None),
        entered_by=entered_by,
    )

    total = 0
    for product_id, quantity, unit_price in parsed:
        product = products.get(product_id)
        if product is None:
            raise ValidationError(f"Product {product_id} not found")
        price = product.selling_price if unit_price is None else unit_price
        subtotal = quantity * price
        total += subtotal
        sale.items.append(
            SaleItem(product_id=product_id, quantity=quantity, unit_price=price, subtotal=subtotal)
        )

    if total > MAX_AMOUNT:
        raise ValidationError(f"total_amount cannot exceed {MAX_AMOUNT}")
    sale.total_amount = total

    db.session.add(sale)
    db.session.commit()
    return sale


def list_sales(*, start_date: date | None = None, end_date: date | None = None, limit: int | None = None) -> list[Sale]:
    limit = min(max(limit or DEFAULT_LIST_LIMIT, 1), MAX_LIST_LIMIT)
    query = Sale.active()
    if start_date:
        query = query.filter(Sale.sale_date >= start_date)
    if end_date:
        query = query.filter(Sale.sale_date <= end_date)
    return (
        query.order_by(Sale.sale_date.desc(), Sale.sale_time.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )


def get_sale(sale_id: int) -> Sale:
    sale = Sale.active().filter(Sale.id == sale_id).first()
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


def delete_sale(sale_id: int) -> None:
    sale = get_sale(sale_id)
    sale.deleted_at = utcnow()
    db.session.commit()


def _gross_margin(total_sales: int, gross_profit: int) -> float:
    if total_sales <= 0:
        return 0.0
    return round(gross_profit / total_sales * 100, 2)


def record_daily_batch(*, sale_date, sales_data) -> dict:
    """
    Upsert per-product day totals, then recompute the day's summary row.

    Rows with quantity_sold <= 0 are ignored. Prices come from the products
    table at entry time. The day summary is rebuilt from every product row
    stored for that date so repeated partial submissions stay consistent.
    """
    day = _parse_date(sale_date, "sale_date")
    if not isinstance(sales_data, list):
        raise ValidationError("sales_data must be a list")

    rows = []
    for index, raw in enumerate(sales_data):
        if not isinstance(raw, dict):
            raise ValidationError(f"sales_data[{index}] must be an object")
        quantity = require_int(raw.get("quantity_sold") or 0, f"sales_data[{index}].quantity_sold")
        if quantity <= 0:
            continue
        rows.append((require_int(raw.get("product_id"), f"sales_data[{index}].product_id"), quantity))

    products = _load_products({pid for pid, _ in rows})

    for product_id, quantity in rows:
        product = products.get(product_id)
        if product is None:
            raise ValidationError(f"Product {product_id} not found")
        summary = (
            db.session.query(ProductSalesSummary)
            .filter_by(sale_date=day, product_id=product_id)
            .first()
        )
        if summary is None:
            summary = ProductSalesSummary(sale_date=day, product_id=product_id)
            db.session.add(summary)
        summary.quantity_sold = quantity
        summary.total_sales = product.selling_price * quantity
        summary.total_cost = product.cost_price * quantity

    db.session.flush()

    day_rows = db.session.query(ProductSalesSummary).filter_by(sale_date=day).all()
    total_sales = sum(r.total_sales for r in day_rows)
    total_cost = sum(r.total_cost for r in day_rows)
    item_count = sum(r.quantity_sold for r in day_rows)
    gross_profit = total_sales - total_cost

    daily = db.session.query(DailySalesSummary).filter_by(sale_date=day).first()
    if daily is None:
        daily = DailySalesSummary(sale_date=day, transaction_count=0)
        db.session.add(daily)
    daily.total_sales = total_sales
    daily.total_cost = total_cost
    daily.item_count = item_count
    daily.gross_profit = gross_profit
    daily.gross_margin = _gross_margin(total_sales, gross_profit)

    db.session.commit()
    return {
        "sale_date": day.isoformat(),
        "total_sales": total_sales,
        "total_cost": total_cost,
        "item_count": item_count,
        "gross_profit": gross_profit,
        "gross_margin": daily.gross_margin,
    }


def list_daily_summaries(*, start_date: date | None = None, end_date: date | None = None) -> list[DailySalesSummary]:
    query = db.session.query(DailySalesSummary)
    if start_date:
        query = query.filter(DailySalesSummary.sale_date >= start_date)
    if end_date:
        query = query.filter(DailySalesSummary.sale_date <= end_date)
    return query.order_by(DailySalesSummary.sale_date.desc()).all()


def list_product_summaries(
    *,
    sale_date: date | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[ProductSalesSummary]:
    query = db.session.query(ProductSalesSummary)
    if sale_date:
        query = query.filter(ProductSalesSummary.sale_date == sale_date)
    if start_date:
        query = query.filter(ProductSalesSummary.sale_date >= start_date)
    if end_date:
        query = query.filter(ProductSalesSummary.sale_date <= end_date)
    return query.order_by(ProductSalesSummary.sale_date.desc(), ProductSalesSummary.product_id.asc()).all()


def delete_daily(sale_date) -> dict:
    day = _parse_date(sale_date, "sale_date")
    products_deleted = (
        db.session.query(ProductSalesSummary)
        .filter_by(sale_date=day)
        .delete(synchronize_session=False)
    )
    daily_deleted = (
        db.session.query(DailySalesSummary)
        .filter_by(sale_date=day)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return {"product_rows": products_deleted, "daily_rows": daily_deleted}
