"""
Sales tests.

Verifies:
- Time-slot derivation from the sale clock
- Register sales snapshot prices and total the items
- Daily batch entry upserts product rows and rebuilds the day summary
"""

from datetime import time

import pytest

from merrily.time_utils import time_slot_for


@pytest.mark.parametrize(
    "clock,slot",
    [
        (time(7, 0), "morning"),
        (time(10, 59), "morning"),
        (time(11, 0), "lunch"),
        (time(13, 59), "lunch"),
        (time(14, 0), "afternoon"),
        (time(16, 59), "afternoon"),
        (time(17, 0), "evening"),
        (time(23, 30), "evening"),
    ],
)
def test_time_slot_for(clock, slot):
    assert time_slot_for(clock) == slot


class TestRecordSale:

    def test_requires_auth(self, client, products):
        resp = client.post("/api/sales", json={})
        assert resp.status_code == 401

    def test_records_items_and_total(self, client, staff_headers, products):
        latte, scone = products
        resp = client.post("/api/sales", headers=staff_headers, json={
            "sale_date": "2026-10-01",
            "sale_time": "12:15",
            "payment_method": "card",
            "items": [
                {"product_id": latte.id, "quantity": 2},
                {"product_id": scone.id, "quantity": 1, "unit_price": 250},
            ],
        })
        assert resp.status_code == 201
        sale = resp.json["sale"]
        assert sale["time_slot"] == "lunch"
        assert sale["total_amount"] == 2 * 500 + 250
        assert sale["entered_by"] == "staff-1"
        assert [i["subtotal"] for i in sale["items"]] == [1000, 250]

    def test_price_edit_does_not_rewrite_history(self, client, staff_headers, products):
        latte, _ = products
        created = client.post("/api/sales", headers=staff_headers, json={
            "sale_date": "2026-10-01", "sale_time": "09:00",
            "items": [{"product_id": latte.id, "quantity": 1}],
        }).json["sale"]
        client.patch(f"/api/products/{latte.id}", headers=staff_headers, json={"selling_price": 900})

        fetched = client.get(f"/api/sales/{created['id']}").json
        assert fetched["total_amount"] == 500
        assert fetched["payment_method"] == "cash"

    @pytest.mark.parametrize(
        "patch",
        [
            {"sale_date": None},
            {"sale_time": "25:00"},
            {"payment_method": "bitcoin"},
            {"items": []},
            {"items": [{"product_id": 999, "quantity": 1}]},
            {"items": [{"product_id": "LATTE", "quantity": 0}]},
        ],
    )
    def test_rejects_invalid(self, client, staff_headers, products, patch):
        latte, _ = products
        payload = {
            "sale_date": "2026-10-01",
            "sale_time": "09:00",
            "items": [{"product_id": latte.id, "quantity": 1}],
        }
        payload.update(patch)
        resp = client.post("/api/sales", headers=staff_headers, json=payload)
        assert resp.status_code == 400

    def test_zero_quantity_rejected(self, client, staff_headers, products):
        latte, _ = products
        resp = client.post("/api/sales", headers=staff_headers, json={
            "sale_date": "2026-10-01", "sale_time": "09:00",
            "items": [{"product_id": latte.id, "quantity": 0}],
        })
        assert resp.status_code == 400
        assert "quantity" in resp.json["error"]


class TestListAndDelete:

    def _sell(self, client, headers, product, day, clock):
        return client.post("/api/sales", headers=headers, json={
            "sale_date": day, "sale_time": clock,
            "items": [{"product_id": product.id, "quantity": 1}],
        }).json["sale"]["id"]

    def test_newest_first_with_limit(self, client, staff_headers, products):
        latte, _ = products
        first = self._sell(client, staff_headers, latte, "2026-10-01", "09:00")
        second = self._sell(client, staff_headers, latte, "2026-10-02", "08:00")
        third = self._sell(client, staff_headers, latte, "2026-10-02", "18:00")

        listed = client.get("/api/sales").json["recent_sales"]
        assert [s["id"] for s in listed] == [third, second, first]

        listed = client.get("/api/sales?limit=1").json["recent_sales"]
        assert [s["id"] for s in listed] == [third]

        listed = client.get("/api/sales?start_date=2026-10-02&end_date=2026-10-02").json["recent_sales"]
        assert len(listed) == 2

    def test_delete_is_soft(self, client, staff_headers, products):
        latte, _ = products
        sale_id = self._sell(client, staff_headers, latte, "2026-10-01", "09:00")
        assert client.delete(f"/api/sales/{sale_id}", headers=staff_headers).status_code == 200
        assert client.get(f"/api/sales/{sale_id}").status_code == 404
        assert client.get("/api/sales").json["recent_sales"] == []


class TestDailyBatch:

    def test_records_and_summarizes(self, client, staff_headers, products):
        latte, scone = products
        resp = client.post("/api/sales/daily", headers=staff_headers, json={
            "sale_date": "2026-10-03",
            "sales_data": [
                {"product_id": latte.id, "quantity_sold": 4},
                {"product_id": scone.id, "quantity_sold": 0},
            ],
        })
        assert resp.status_code == 201
        summary = resp.json["summary"]
        assert summary["total_sales"] == 2000
        assert summary["total_cost"] == 600
        assert summary["item_count"] == 4
        assert summary["gross_profit"] == 1400
        assert summary["gross_margin"] == 70.0

        rows = client.get("/api/sales/product-summary?sale_date=2026-10-03").json
        assert [(r["product_name"], r["quantity_sold"]) for r in rows] == [("Latte", 4)]

    def test_resubmission_updates_same_rows(self, client, staff_headers, products):
        latte, scone = products
        client.post("/api/sales/daily", headers=staff_headers, json={
            "sale_date": "2026-10-03",
            "sales_data": [{"product_id": latte.id, "quantity_sold": 4}],
        })
        resp = client.post("/api/sales/daily", headers=staff_headers, json={
            "sale_date": "2026-10-03",
            "sales_data": [{"product_id": scone.id, "quantity_sold": 3}],
        })
        # the day summary covers every product row stored for the date
        assert resp.json["summary"]["total_sales"] == 2000 + 900
        assert resp.json["summary"]["item_count"] == 7

        daily = client.get("/api/sales/daily").json
        assert len(daily) == 1
        assert daily[0]["transaction_count"] == 0

    def test_delete_day(self, client, staff_headers, products):
        latte, _ = products
        client.post("/api/sales/daily", headers=staff_headers, json={
            "sale_date": "2026-10-03",
            "sales_data": [{"product_id": latte.id, "quantity_sold": 1}],
        })
        resp = client.delete("/api/sales/daily?sale_date=2026-10-03", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["product_rows"] == 1
        assert resp.json["daily_rows"] == 1
        assert client.get("/api/sales/daily").json == []

    def test_requires_fields(self, client, staff_headers, products):
        assert client.post("/api/sales/daily", headers=staff_headers, json={}).status_code == 400
        assert client.delete("/api/sales/daily", headers=staff_headers).status_code == 400


class TestCollectionsForSaleDate:

    def test_requires_sale_date(self, client, db_session):
        assert client.get("/api/sales/collections").status_code == 400

    def test_returns_windowed_collections_with_products(self, client, staff_headers, products):
        latte, _ = products
        cid = client.post("/api/collections", headers=staff_headers, json={
            "name": "Autumn", "start_date": "2026-09-01", "end_date": "2026-11-30",
        }).json["id"]
        client.post(f"/api/collections/{cid}/products", headers=staff_headers, json={"product_id": latte.id})

        listed = client.get("/api/sales/collections?sale_date=2026-10-10").json
        assert [c["name"] for c in listed] == ["Autumn"]
        assert [p["name"] for p in listed[0]["products"]] == ["Latte"]

        assert client.get("/api/sales/collections?sale_date=2026-12-10").json == []
