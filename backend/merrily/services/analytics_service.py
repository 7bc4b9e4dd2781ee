# Overview: Service-layer operations for sales analytics; dashboard overview and chart series.

from __future__ import annotations

from collections import defaultdict
from datetime import date

from sqlalchemy import func

from ..extensions import db
from ..models import (
    Sale,
    SaleItem,
    Product,
    Category,
    DailySalesSummary,
    ProductSalesSummary,
    SalesTarget,
)
from merrily.time_utils import local_today, month_key

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
RANKING_SIZE = 10


class AnalyticsError(ValueError):
    """Raised for unsupported chart requests."""
    pass


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _profit_rate(revenue: int, cost: int) -> float:
    return (revenue - cost) / revenue * 100 if revenue else 0.0


def sales_overview(*, today: date | None = None) -> dict:
    """
    Dashboard numbers computed from live sales and their items.

    time_slots is keyed by sale hour ("11", "12", ...). Customer count and
    average spend are not tracked and are always null.
    """
    today = today or local_today()

    sales = (
        Sale.active()
        .order_by(Sale.sale_date.asc(), Sale.sale_time.asc(), Sale.id.asc())
        .all()
    )

    total_amount = 0
    today_total = 0
    daily: dict[str, int] = {}
    monthly: dict[str, int] = {}
    hours: dict[str, int] = {}

    for sale in sales:
        amount = sale.total_amount or 0
        total_amount += amount
        if sale.sale_date == today:
            today_total += amount
        day_key = sale.sale_date.isoformat()
        daily[day_key] = daily.get(day_key, 0) + amount
        m_key = month_key(sale.sale_date)
        monthly[m_key] = monthly.get(m_key, 0) + amount
        if sale.sale_time is not None:
            h_key = str(sale.sale_time.hour)
            hours[h_key] = hours.get(h_key, 0) + amount

    item_rows = (
        db.session.query(
            SaleItem.product_id,
            Product.name,
            func.sum(SaleItem.subtotal).label("revenue"),
            func.sum(SaleItem.quantity * Product.cost_price).label("cost"),
            func.sum(SaleItem.quantity).label("quantity"),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .join(Product, Product.id == SaleItem.product_id)
        .filter(Sale.deleted_at.is_(None))
        .group_by(SaleItem.product_id, Product.name)
        .all()
    )
    ranking = sorted(
        (
            {
                "product_id": row.product_id,
                "name": row.name,
                "revenue": int(row.revenue or 0),
                "cost": int(row.cost or 0),
                "profit": int(row.revenue or 0) - int(row.cost or 0),
                "profit_rate": _profit_rate(int(row.revenue or 0), int(row.cost or 0)),
                "quantity": int(row.quantity or 0),
            }
            for row in item_rows
        ),
        key=lambda r: r["revenue"],
        reverse=True,
    )[:RANKING_SIZE]

    # Cost rate uses the ranked products' cost over all revenue
    total_cost = sum(r["cost"] for r in ranking)
    cost_rate = total_cost / total_amount * 100 if total_amount else 0.0

    prev_year, prev_month = _previous_month(today.year, today.month)

    return {
        "total_amount": total_amount,
        "today_total": today_total,
        "daily_sales": [{"date": k, "total": v} for k, v in daily.items()],
        "monthly_sales": [{"month": k, "total": v} for k, v in monthly.items()],
        "time_slots": hours,
        "product_ranking": ranking,
        "current_month_sales": monthly.get(f"{today.year}-{today.month:02d}", 0),
        "prev_month_sales": monthly.get(f"{prev_year}-{prev_month:02d}", 0),
        "last_year_month_sales": monthly.get(f"{today.year - 1}-{today.month:02d}", 0),
        "cost_rate": cost_rate,
        "customer_count": None,
        "average_spend": None,
    }


def _daily_query(start: date | None, end: date | None):
    query = db.session.query(DailySalesSummary)
    if start:
        query = query.filter(DailySalesSummary.sale_date >= start)
    if end:
        query = query.filter(DailySalesSummary.sale_date <= end)
    return query


def _product_query(start: date | None, end: date | None, *entities):
    query = db.session.query(*(entities or (ProductSalesSummary,))).select_from(ProductSalesSummary)
    if start:
        query = query.filter(ProductSalesSummary.sale_date >= start)
    if end:
        query = query.filter(ProductSalesSummary.sale_date <= end)
    return query


def daily_trend(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    rows = _daily_query(start, end).order_by(DailySalesSummary.sale_date.asc()).all()
    return [
        {
            "sale_date": r.sale_date.isoformat(),
            "total_sales": r.total_sales,
            "gross_profit": r.gross_profit,
            "transaction_count": r.transaction_count,
            "item_count": r.item_count,
        }
        for r in rows
    ]


def monthly_comparison(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    totals: dict[str, dict] = defaultdict(lambda: {"total_sales": 0, "gross_profit": 0})
    query = _daily_query(start, end)
    for r in query.all():
        if year and r.sale_date.year != year:
            continue
        bucket = totals[month_key(r.sale_date)]
        bucket["total_sales"] += r.total_sales
        bucket["gross_profit"] += r.gross_profit
    return [{"month": k, **totals[k]} for k in sorted(totals)]


def product_ranking(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    rows = (
        _product_query(
            start,
            end,
            ProductSalesSummary.product_id,
            func.sum(ProductSalesSummary.quantity_sold).label("quantity_sold"),
            func.sum(ProductSalesSummary.total_sales).label("total_sales"),
        )
        .group_by(ProductSalesSummary.product_id)
        .all()
    )
    names = {
        p.id: p.name
        for p in db.session.query(Product).filter(Product.id.in_([r.product_id for r in rows])).all()
    } if rows else {}
    ranking = [
        {
            "product_id": r.product_id,
            "product_name": names.get(r.product_id, "Unknown"),
            "quantity_sold": int(r.quantity_sold or 0),
            "total_sales": int(r.total_sales or 0),
        }
        for r in rows
    ]
    ranking.sort(key=lambda r: r["total_sales"], reverse=True)
    return ranking[:RANKING_SIZE]


def category_breakdown(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    totals: dict[str, int] = defaultdict(int)
    rows = (
        _product_query(start, end, Category.name, ProductSalesSummary.total_sales)
        .outerjoin(Product, Product.id == ProductSalesSummary.product_id)
        .outerjoin(Category, Category.id == Product.category_id)
        .all()
    )
    for name, total in rows:
        totals[name or "Uncategorized"] += int(total or 0)
    breakdown = [{"category": k, "total_sales": v} for k, v in totals.items()]
    breakdown.sort(key=lambda r: r["total_sales"], reverse=True)
    return breakdown


def hourly_sales(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    buckets = [{"hour": h, "total_sales": 0, "transaction_count": 0} for h in range(24)]
    query = Sale.active()
    if start:
        query = query.filter(Sale.sale_date >= start)
    if end:
        query = query.filter(Sale.sale_date <= end)
    for sale in query.all():
        bucket = buckets[sale.sale_time.hour]
        bucket["total_sales"] += sale.total_amount or 0
        bucket["transaction_count"] += 1
    return buckets


def weekday_sales(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    totals = [0] * 7
    counts = [0] * 7
    for r in _daily_query(start, end).all():
        # date.weekday() is Monday=0; shift so Sunday leads
        idx = (r.sale_date.weekday() + 1) % 7
        totals[idx] += r.total_sales
        counts[idx] += 1
    return [
        {
            "weekday": WEEKDAY_LABELS[i],
            "total_sales": totals[i],
            "average_sales": round(totals[i] / counts[i]) if counts[i] else 0,
        }
        for i in range(7)
    ]


def target_achievement(start: date | None, end: date | None, year: int | None = None) -> list[dict]:
    target_year = year or local_today().year
    targets = {
        t.month: t
        for t in db.session.query(SalesTarget).filter(SalesTarget.year == target_year).all()
    }
    actual: dict[int, int] = defaultdict(int)
    rows = _daily_query(date(target_year, 1, 1), date(target_year, 12, 31)).all()
    for r in rows:
        actual[r.sale_date.month] += r.total_sales

    result = []
    for m in range(1, 13):
        target_amount = targets[m].target_amount if m in targets else 0
        result.append({
            "month": m,
            "target_amount": target_amount,
            "actual_amount": actual[m],
            "achievement_rate": round(actual[m] / target_amount * 100) if target_amount > 0 else 0,
        })
    return result


CHARTS = {
    "daily_trend": ("Daily sales trend", daily_trend),
    "monthly_comparison": ("Monthly sales comparison", monthly_comparison),
    "product_ranking": ("Product sales ranking (top 10)", product_ranking),
    "category_breakdown": ("Sales by category", category_breakdown),
    "hourly_sales": ("Sales by hour", hourly_sales),
    "weekday_sales": ("Sales by weekday", weekday_sales),
    "target_achievement": ("Sales target achievement", target_achievement),
}


def chart(chart_type: str | None, *, start: date | None = None, end: date | None = None, year: int | None = None) -> dict:
    if chart_type not in CHARTS:
        raise AnalyticsError(f"type must be one of: {', '.join(CHARTS)}")
    title, builder = CHARTS[chart_type]
    result = {"type": chart_type, "title": title, "data": builder(start, end, year)}
    if chart_type == "target_achievement":
        result["year"] = year or local_today().year
    return result
