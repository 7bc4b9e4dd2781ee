# Overview: Service-layer operations for maintenance; hard-deletes long soft-deleted rows.

from __future__ import annotations

from datetime import timedelta

from ..extensions import db
from ..models import Sale, SaleItem, Expense, Post, Comment, PostLike, CollectionProduct
from merrily.time_utils import utcnow


def _expired(model, cutoff):
    return db.session.query(model).filter(model.deleted_at.isnot(None), model.deleted_at < cutoff)


def purge_deleted(*, days: int = 90) -> dict:
    """
    Remove rows soft-deleted more than `days` ago.

    Products and categories are never purged: sale history and summaries
    still reference them.
    """
    cutoff = utcnow() - timedelta(days=days)
    counts = {}

    sale_ids = [row.id for row in _expired(Sale, cutoff).with_entities(Sale.id).all()]
    if sale_ids:
        db.session.query(SaleItem).filter(SaleItem.sale_id.in_(sale_ids)).delete(synchronize_session=False)
    counts["sales"] = _expired(Sale, cutoff).delete(synchronize_session=False)

    counts["comments"] = _expired(Comment, cutoff).delete(synchronize_session=False)

    post_ids = [row.id for row in _expired(Post, cutoff).with_entities(Post.id).all()]
    if post_ids:
        db.session.query(Comment).filter(Comment.post_id.in_(post_ids)).delete(synchronize_session=False)
        db.session.query(PostLike).filter(PostLike.post_id.in_(post_ids)).delete(synchronize_session=False)
    counts["posts"] = _expired(Post, cutoff).delete(synchronize_session=False)

    counts["expenses"] = _expired(Expense, cutoff).delete(synchronize_session=False)
    counts["collection_links"] = _expired(CollectionProduct, cutoff).delete(synchronize_session=False)

    db.session.commit()
    return counts
