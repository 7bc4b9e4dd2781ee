from __future__ import annotations

from ..extensions import db
from .catalog import SoftDeleteMixin
from merrily.time_utils import to_utc_z, to_iso_date


class ExpenseCategory(SoftDeleteMixin, db.Model):
    __tablename__ = "expense_categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "display_order": self.display_order,
        }


class Expense(SoftDeleteMixin, db.Model):
    __tablename__ = "expenses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    expense_date = db.Column(db.Date, nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("expense_categories.id"), nullable=True, index=True)
    amount = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    vendor_name = db.Column(db.String(128), nullable=True)
    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    status = db.Column(db.String(16), nullable=False, default="paid")  # paid, pending
    created_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    category = db.relationship("ExpenseCategory")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expense_date": to_iso_date(self.expense_date),
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else "Uncategorized",
            "amount": self.amount,
            "description": self.description,
            "vendor_name": self.vendor_name,
            "payment_method": self.payment_method,
            "status": self.status,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
        }


class Budget(db.Model):
    __tablename__ = "budgets"
    __table_args__ = (
        db.UniqueConstraint("year", "month", "category", name="uq_budgets_year_month_category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(128), nullable=False)
    planned_amount = db.Column(db.Integer, nullable=False, default=0)
    actual_amount = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.String(64), nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "category": self.category,
            "planned_amount": self.planned_amount,
            "actual_amount": self.actual_amount,
            "variance": self.actual_amount - self.planned_amount,
            "notes": self.notes,
            "created_by": self.created_by,
            "updated_at": to_utc_z(self.updated_at),
        }
