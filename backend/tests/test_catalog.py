"""
Catalog tests: products and categories.

Verifies:
- Reads are public, writes need a token (401)
- Required fields and money bounds (400)
- Soft delete hides rows from every listing
- Categories in use cannot be deleted (409)
"""

import pytest

from merrily.models import Product
from merrily.services import catalog_service


class TestProductRoutes:

    def test_list_is_public(self, client, products):
        resp = client.get("/api/products")
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json] == ["Latte", "Scone"]
        assert resp.json[0]["category_name"] == "Drinks"

    def test_create_requires_auth(self, client, category):
        resp = client.post("/api/products", json={"name": "Mocha"})
        assert resp.status_code == 401

    def test_create(self, client, staff_headers, category):
        resp = client.post("/api/products", headers=staff_headers, json={
            "name": "Mocha",
            "category_id": category.id,
            "selling_price": 550,
            "cost_price": 180,
        })
        assert resp.status_code == 201
        assert resp.json["message"] == "Product created"

        fetched = client.get(f"/api/products/{resp.json['product_id']}")
        assert fetched.json["selling_price"] == 550
        assert fetched.json["is_available"] is True

    def test_create_missing_fields(self, client, staff_headers, category):
        resp = client.post("/api/products", headers=staff_headers, json={"name": "Mocha"})
        assert resp.status_code == 400
        assert "Missing required fields" in resp.json["error"]

    @pytest.mark.parametrize("price", [-1, 100_000_000, "12.5", "abc"])
    def test_create_rejects_bad_price(self, client, staff_headers, category, price):
        resp = client.post("/api/products", headers=staff_headers, json={
            "name": "Mocha",
            "category_id": category.id,
            "selling_price": price,
            "cost_price": 0,
        })
        assert resp.status_code == 400

    def test_create_unknown_category(self, client, staff_headers, category):
        resp = client.post("/api/products", headers=staff_headers, json={
            "name": "Mocha", "category_id": 9999, "selling_price": 1, "cost_price": 1,
        })
        assert resp.status_code == 400

    def test_patch_updates_only_given_fields(self, client, staff_headers, products):
        latte, _ = products
        resp = client.patch(f"/api/products/{latte.id}", headers=staff_headers, json={"selling_price": 520})
        assert resp.status_code == 200
        assert resp.json["product"]["selling_price"] == 520
        assert resp.json["product"]["cost_price"] == 150

    def test_put_requires_full_record(self, client, staff_headers, products):
        latte, _ = products
        resp = client.put(f"/api/products/{latte.id}", headers=staff_headers, json={"selling_price": 520})
        assert resp.status_code == 400

    def test_delete_is_soft(self, client, db_session, staff_headers, products):
        latte, _ = products
        resp = client.delete(f"/api/products/{latte.id}", headers=staff_headers)
        assert resp.status_code == 200

        assert client.get(f"/api/products/{latte.id}").status_code == 404
        assert [p["name"] for p in client.get("/api/products").json] == ["Scone"]

        db_session.expire_all()
        row = db_session.get(Product, latte.id)
        assert row is not None and row.deleted_at is not None

    def test_missing_product(self, client, staff_headers, db_session):
        assert client.get("/api/products/404").status_code == 404
        assert client.delete("/api/products/404", headers=staff_headers).status_code == 404


class TestCategoryRoutes:

    def test_create_defaults(self, client, staff_headers):
        resp = client.post("/api/categories", headers=staff_headers, json={"name": "Seasonal"})
        assert resp.status_code == 201

        listed = client.get("/api/categories").json
        assert listed == [{
            "id": resp.json["category_id"],
            "name": "Seasonal",
            "description": "",
            "display_order": 0,
            "is_seasonal": False,
        }]

    def test_create_requires_name(self, client, staff_headers):
        resp = client.post("/api/categories", headers=staff_headers, json={"description": "x"})
        assert resp.status_code == 400

    def test_update(self, client, staff_headers, category):
        resp = client.put(f"/api/categories/{category.id}", headers=staff_headers, json={"is_seasonal": True})
        assert resp.status_code == 200
        assert resp.json["category"]["is_seasonal"] is True

    def test_delete_in_use_conflicts(self, client, staff_headers, products, category):
        resp = client.delete(f"/api/categories/{category.id}", headers=staff_headers)
        assert resp.status_code == 409

    def test_delete_after_products_removed(self, client, staff_headers, products, category):
        for product in products:
            client.delete(f"/api/products/{product.id}", headers=staff_headers)
        resp = client.delete(f"/api/categories/{category.id}", headers=staff_headers)
        assert resp.status_code == 200
        assert client.get("/api/categories").json == []


class TestSeedDefaults:

    def test_seed_is_idempotent(self, db_session, category):
        # "Drinks" already exists from the fixture
        assert catalog_service.seed_default_categories() == 2
        assert catalog_service.seed_default_categories() == 0
        names = [c.name for c in catalog_service.list_categories()]
        assert sorted(names) == ["Dessert", "Drinks", "Food"]
