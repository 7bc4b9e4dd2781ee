from __future__ import annotations

from ..extensions import db
from merrily.time_utils import to_utc_z, to_iso_date


class SoftDeleteMixin:
    """Rows are hidden by setting deleted_at; default queries filter on it."""
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @classmethod
    def active(cls):
        return db.session.query(cls).filter(cls.deleted_at.is_(None))


class Category(SoftDeleteMixin, db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    is_seasonal = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "display_order": self.display_order,
            "is_seasonal": self.is_seasonal,
        }


class Product(SoftDeleteMixin, db.Model):
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("selling_price >= 0", name="ck_products_selling_price_nonneg"),
        db.CheckConstraint("cost_price >= 0", name="ck_products_cost_price_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Whole currency units (JPY)
    selling_price = db.Column(db.Integer, nullable=False, default=0)
    cost_price = db.Column(db.Integer, nullable=False, default=0)

    image_url = db.Column(db.String(512), nullable=True)
    is_available = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else "Uncategorized",
            "name": self.name,
            "description": self.description,
            "selling_price": self.selling_price,
            "cost_price": self.cost_price,
            "image_url": self.image_url,
            "is_available": self.is_available,
        }


class ProductCollection(SoftDeleteMixin, db.Model):
    """
    A product folder shown on the sales-entry screen.

    Visible for sale dates inside [start_date, end_date]; a null bound
    leaves that side of the window open.
    """
    __tablename__ = "product_collections"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.Date, nullable=True, index=True)
    end_date = db.Column(db.Date, nullable=True, index=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    links = db.relationship("CollectionProduct", back_populates="collection", lazy=True)

    def active_products(self) -> list[Product]:
        return [
            link.product
            for link in self.links
            if link.deleted_at is None and link.product is not None and link.product.deleted_at is None
        ]

    def to_dict(self, include_products: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "start_date": to_iso_date(self.start_date),
            "end_date": to_iso_date(self.end_date),
            "display_order": self.display_order,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_products:
            data["products"] = [p.to_dict() for p in self.active_products()]
        return data


class CollectionProduct(db.Model):
    __tablename__ = "collection_products"
    __table_args__ = (
        db.UniqueConstraint("collection_id", "product_id", name="uq_collection_products_pair"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    collection_id = db.Column(db.Integer, db.ForeignKey("product_collections.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    collection = db.relationship("ProductCollection", back_populates="links")
    product = db.relationship("Product")
