"""
Maintenance tests: purging old soft-deleted rows and the CLI groups.
"""

from datetime import date, time, timedelta

import pytest

from merrily.models import Comment, Post, PostLike, Product, Sale, SaleItem, UserProfile
from merrily.services import maintenance_service
from merrily.time_utils import utcnow


def _sale(db_session, product, deleted_at=None):
    sale = Sale(sale_date=date(2026, 6, 1), sale_time=time(9, 0), time_slot="morning",
                total_amount=500, deleted_at=deleted_at)
    db_session.add(sale)
    db_session.flush()
    db_session.add(SaleItem(sale_id=sale.id, product_id=product.id, quantity=1, unit_price=500, subtotal=500))
    db_session.commit()
    return sale.id


@pytest.fixture
def aged_rows(db_session, products):
    latte, scone = products
    long_ago = utcnow() - timedelta(days=120)
    recently = utcnow() - timedelta(days=5)

    old_sale = _sale(db_session, latte, deleted_at=long_ago)
    recent_sale = _sale(db_session, latte, deleted_at=recently)
    live_sale = _sale(db_session, latte)

    post = Post(user_id="staff-1", content="old", deleted_at=long_ago)
    db_session.add(post)
    db_session.flush()
    db_session.add_all([
        Comment(post_id=post.id, user_id="staff-2", content="live comment on a purged post"),
        PostLike(post_id=post.id, user_id="staff-2"),
    ])
    scone.deleted_at = long_ago
    db_session.commit()
    return {"old": old_sale, "recent": recent_sale, "live": live_sale, "scone": scone.id}


class TestPurgeDeleted:

    def test_only_rows_past_retention(self, db_session, aged_rows):
        counts = maintenance_service.purge_deleted(days=90)

        assert counts["sales"] == 1
        assert counts["posts"] == 1
        remaining = {s.id for s in db_session.query(Sale).all()}
        assert remaining == {aged_rows["recent"], aged_rows["live"]}
        assert db_session.query(SaleItem).filter_by(sale_id=aged_rows["old"]).count() == 0

        # children of a purged post go with it
        assert db_session.query(Comment).count() == 0
        assert db_session.query(PostLike).count() == 0

    def test_products_are_kept(self, db_session, aged_rows):
        maintenance_service.purge_deleted(days=1)
        assert db_session.get(Product, aged_rows["scone"]) is not None

    def test_cli(self, app, db_session, aged_rows):
        result = app.test_cli_runner().invoke(args=["maintenance", "purge-deleted", "--days", "1"])
        assert result.exit_code == 0
        assert "Deleted 2 sales older than 1 days." in result.output


class TestUserCommands:

    def test_set_admin_and_revoke(self, app, db_session, profiles):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["users", "set-admin", "staff-1"])
        assert result.exit_code == 0
        assert db_session.get(UserProfile, "staff-1").is_admin is True

        runner.invoke(args=["users", "set-admin", "staff-1", "--revoke"])
        db_session.expire_all()
        assert db_session.get(UserProfile, "staff-1").is_admin is False

    def test_set_admin_unknown(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "set-admin", "ghost"])
        assert result.exit_code == 1

    def test_list(self, app, db_session, profiles):
        result = app.test_cli_runner().invoke(args=["users", "list"])
        assert "Total: 3 users" in result.output
