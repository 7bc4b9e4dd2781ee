# Overview: Service-layer operations for time-windowed product collections.

from __future__ import annotations

from datetime import date

from sqlalchemy import or_

from ..extensions import db
from ..models import CollectionProduct, ProductCollection
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_date_window,
    require_int,
    NotFoundError,
)
from .catalog_service import get_product
from merrily.time_utils import utcnow

COLLECTION_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "display_order", "start_date", "end_date"},
    required_on_create={"name"},
    ignore_unknown=True,
)
WINDOW_POLICY = ModelValidationPolicy(
    writable_fields={"start_date", "end_date"},
    ignore_unknown=True,
)


def get_collection(collection_id: int) -> ProductCollection:
    collection = ProductCollection.active().filter(ProductCollection.id == collection_id).first()
    if collection is None:
        raise NotFoundError("Collection not found")
    return collection


def list_collections(*, on_date: date | None = None) -> list[ProductCollection]:
    """Live collections; with on_date, only those whose window covers that date."""
    query = ProductCollection.active()
    if on_date is not None:
        query = query.filter(
            or_(ProductCollection.start_date.is_(None), ProductCollection.start_date <= on_date),
            or_(ProductCollection.end_date.is_(None), ProductCollection.end_date >= on_date),
        )
    return query.order_by(ProductCollection.display_order.asc(), ProductCollection.id.asc()).all()


def _apply(collection: ProductCollection, patch: dict) -> None:
    start = patch.get("start_date", collection.start_date)
    end = patch.get("end_date", collection.end_date)
    enforce_date_window(start, end)
    for k, v in patch.items():
        setattr(collection, k, v)


def create_collection(payload: dict) -> ProductCollection:
    patch = validate_payload(model=ProductCollection, payload=payload, policy=COLLECTION_POLICY, partial=False)
    enforce_date_window(patch.get("start_date"), patch.get("end_date"))
    if patch.get("display_order") is None:
        patch["display_order"] = 0

    collection = ProductCollection(**patch)
    db.session.add(collection)
    db.session.commit()
    return collection


def update_collection(collection_id: int, payload: dict) -> ProductCollection:
    collection = get_collection(collection_id)
    patch = validate_payload(model=ProductCollection, payload=payload, policy=COLLECTION_POLICY, partial=True)
    _apply(collection, patch)
    db.session.commit()
    return collection


def update_sales_window(collection_id: int, payload: dict) -> ProductCollection:
    collection = get_collection(collection_id)
    patch = validate_payload(model=ProductCollection, payload=payload, policy=WINDOW_POLICY, partial=True)
    _apply(collection, patch)
    db.session.commit()
    return collection


def delete_collection(collection_id: int) -> None:
    collection = get_collection(collection_id)
    collection.deleted_at = utcnow()
    db.session.commit()


def add_product(collection_id: int, product_id) -> CollectionProduct:
    """Link a product; re-adding an existing or removed link is a no-op revive."""
    collection = get_collection(collection_id)
    product = get_product(require_int(product_id, "product_id"))

    link = (
        db.session.query(CollectionProduct)
        .filter_by(collection_id=collection.id, product_id=product.id)
        .first()
    )
    if link is None:
        link = CollectionProduct(collection_id=collection.id, product_id=product.id)
        db.session.add(link)
    else:
        link.deleted_at = None
    db.session.commit()
    return link


def remove_product(collection_id: int, product_id: int) -> None:
    collection = get_collection(collection_id)
    link = (
        db.session.query(CollectionProduct)
        .filter(
            CollectionProduct.collection_id == collection.id,
            CollectionProduct.product_id == product_id,
            CollectionProduct.deleted_at.is_(None),
        )
        .first()
    )
    if link is None:
        raise NotFoundError("Product is not in this collection")
    link.deleted_at = utcnow()
    db.session.commit()
