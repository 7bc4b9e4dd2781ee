# Overview: Service-layer operations for products and categories.

"""
Catalog Service

Products and categories are soft-deleted: every listing filters on
deleted_at IS NULL and a delete only stamps the timestamp. A category cannot
be deleted while live products still point at it.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Category, Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_amounts,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from merrily.time_utils import utcnow

PRODUCT_MUTABLE_FIELDS = {
    "name", "category_id", "description", "selling_price", "cost_price", "image_url", "is_available",
}
CATEGORY_MUTABLE_FIELDS = {"name", "description", "display_order", "is_seasonal"}

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_MUTABLE_FIELDS,
    required_on_create={"name", "category_id", "selling_price", "cost_price"},
    ignore_unknown=True,
)
CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=CATEGORY_MUTABLE_FIELDS,
    required_on_create={"name"},
    ignore_unknown=True,
)

DEFAULT_CATEGORIES = (
    ("Drinks", "Coffee, tea and soft drinks"),
    ("Food", "Meals and light bites"),
    ("Dessert", "Cakes and sweets"),
)


def _require_category(category_id: int) -> Category:
    category = Category.active().filter(Category.id == category_id).first()
    if category is None:
        raise ValidationError("category_id does not reference an existing category")
    return category


def get_product(product_id: int) -> Product:
    product = Product.active().filter(Product.id == product_id).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def list_products() -> list[Product]:
    return Product.active().order_by(Product.category_id.asc(), Product.id.asc()).all()


def create_product(payload: dict) -> Product:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_amounts(patch, "selling_price", "cost_price")
    _require_category(patch["category_id"])

    product = Product(**patch)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(product_id: int, payload: dict, *, partial: bool) -> Product:
    """PUT validates the full required set; PATCH validates only provided keys."""
    product = get_product(product_id)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_amounts(patch, "selling_price", "cost_price")
    if "category_id" in patch:
        _require_category(patch["category_id"])

    for k, v in patch.items():
        setattr(product, k, v)
    db.session.commit()
    return product


def delete_product(product_id: int) -> None:
    product = get_product(product_id)
    product.deleted_at = utcnow()
    db.session.commit()


def get_category(category_id: int) -> Category:
    category = Category.active().filter(Category.id == category_id).first()
    if category is None:
        raise NotFoundError("Category not found")
    return category


def list_categories() -> list[Category]:
    return Category.active().order_by(Category.display_order.asc(), Category.id.asc()).all()


def create_category(payload: dict) -> Category:
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    patch.setdefault("description", "")
    if patch.get("display_order") is None:
        patch["display_order"] = 0

    category = Category(**patch)
    db.session.add(category)
    db.session.commit()
    return category


def update_category(category_id: int, payload: dict) -> Category:
    category = get_category(category_id)
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
    for k, v in patch.items():
        setattr(category, k, v)
    db.session.commit()
    return category


def delete_category(category_id: int) -> None:
    category = get_category(category_id)
    in_use = Product.active().filter(Product.category_id == category.id).count()
    if in_use:
        raise ConflictError(f"Category is used by {in_use} product(s)")
    category.deleted_at = utcnow()
    db.session.commit()


def seed_default_categories() -> int:
    """Insert the starter categories that are missing. Returns how many were added."""
    existing = {c.name for c in Category.active().all()}
    added = 0
    for order, (name, description) in enumerate(DEFAULT_CATEGORIES, start=1):
        if name in existing:
            continue
        db.session.add(Category(name=name, description=description, display_order=order))
        added += 1
    db.session.commit()
    return added
