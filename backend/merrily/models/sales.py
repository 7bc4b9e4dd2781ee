from __future__ import annotations

from ..extensions import db
from .catalog import SoftDeleteMixin
from merrily.time_utils import to_utc_z, to_iso_date, to_clock


PAYMENT_METHODS = ("cash", "card", "qr", "other")
TIME_SLOTS = ("morning", "lunch", "afternoon", "evening")


class Sale(SoftDeleteMixin, db.Model):
    """
    One register transaction entered by staff.

    total_amount is the sum of item subtotals at entry time; unit prices are
    snapshotted on SaleItem so later price edits do not rewrite history.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_date_time", "sale_date", "sale_time"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_date = db.Column(db.Date, nullable=False, index=True)
    sale_time = db.Column(db.Time, nullable=False)
    time_slot = db.Column(db.String(16), nullable=False)
    total_amount = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(16), nullable=True)
    note = db.Column(db.Text, nullable=True)
    entered_by = db.Column(db.String(64), nullable=True, index=True)  # auth user id

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship("SaleItem", back_populates="sale", lazy=True, cascade="all, delete-orphan")

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "sale_date": to_iso_date(self.sale_date),
            "sale_time": to_clock(self.sale_time),
            "time_slot": self.time_slot,
            "total_amount": self.total_amount,
            "payment_method": self.payment_method,
            "note": self.note,
            "entered_by": self.entered_by,
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class SaleItem(db.Model):
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_pos"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    subtotal = db.Column(db.Integer, nullable=False)

    sale = db.relationship("Sale", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "subtotal": self.subtotal,
        }


class DailySalesSummary(db.Model):
    """Per-day totals written by batch sales entry (one row per date)."""
    __tablename__ = "daily_sales_summary"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_date = db.Column(db.Date, nullable=False, unique=True)
    total_sales = db.Column(db.Integer, nullable=False, default=0)
    total_cost = db.Column(db.Integer, nullable=False, default=0)
    item_count = db.Column(db.Integer, nullable=False, default=0)
    transaction_count = db.Column(db.Integer, nullable=False, default=0)
    gross_profit = db.Column(db.Integer, nullable=False, default=0)
    gross_margin = db.Column(db.Float, nullable=False, default=0.0)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "sale_date": to_iso_date(self.sale_date),
            "total_sales": self.total_sales,
            "total_cost": self.total_cost,
            "item_count": self.item_count,
            "transaction_count": self.transaction_count,
            "gross_profit": self.gross_profit,
            "gross_margin": self.gross_margin,
            "updated_at": to_utc_z(self.updated_at),
        }


class ProductSalesSummary(db.Model):
    __tablename__ = "product_sales_summary"
    __table_args__ = (
        db.UniqueConstraint("sale_date", "product_id", name="uq_product_sales_date_product"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_date = db.Column(db.Date, nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity_sold = db.Column(db.Integer, nullable=False, default=0)
    total_sales = db.Column(db.Integer, nullable=False, default=0)
    total_cost = db.Column(db.Integer, nullable=False, default=0)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_date": to_iso_date(self.sale_date),
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "category_id": self.product.category_id if self.product else None,
            "quantity_sold": self.quantity_sold,
            "total_sales": self.total_sales,
            "total_cost": self.total_cost,
        }


class SalesTarget(db.Model):
    __tablename__ = "sales_targets"
    __table_args__ = (
        db.UniqueConstraint("year", "month", name="uq_sales_targets_year_month"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)
    target_amount = db.Column(db.Integer, nullable=False, default=0)
    target_customers = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "target_amount": self.target_amount,
            "target_customers": self.target_customers,
            "notes": self.notes,
            "updated_at": to_utc_z(self.updated_at),
        }
