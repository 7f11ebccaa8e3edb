"""
Inventory ledger tests.

Covers:
- Product creation with given or generated SKUs
- SKU uniqueness per merchant
- Bulk stock updates (all or nothing, unknown SKUs reported)
- Cost price changes (admin only)
- Low stock derivation and listing
"""

import re

from conftest import make_product, manual_order

from oms.extensions import db
from oms.models import InventoryRecord, Product

GENERATED_SKU = re.compile(r"^SKU-\d{8}-\d{6}-[A-Z0-9]{5}$")


class TestAddProduct:

    def test_generates_sku(self, admin_client, db_session):
        resp = admin_client.post("/api/inventory/add-product", json={
            "name": "Lamp",
            "category": "Home",
            "stock": 5,
            "reorderLevel": 1,
            "unitPrice": "12.50",
        })
        assert resp.status_code == 201
        product = resp.get_json()["product"]
        assert GENERATED_SKU.match(product["sku"])
        assert product["quantity_available"] == 5
        assert product["reorder_level"] == 1
        assert product["unit_price"] == 12.5
        assert product["is_low_stock"] is False

    def test_keeps_given_sku_uppercased(self, admin_client, db_session):
        resp = admin_client.post("/api/inventory", json={"name": "Rug", "sku": "rug-001"})
        assert resp.status_code == 201
        assert resp.get_json()["product"]["sku"] == "RUG-001"

    def test_duplicate_sku_conflicts(self, admin_a, admin_client):
        make_product(admin_a.merchant_id, "Rug", sku="RUG-001")
        resp = admin_client.post("/api/inventory/add-product", json={"name": "Other rug", "sku": "rug-001"})
        assert resp.status_code == 409
        assert resp.get_json()["message"] == 'SKU "RUG-001" already exists'

    def test_same_sku_allowed_in_other_merchant(self, admin_b, admin_client):
        make_product(admin_b.merchant_id, "Rug", sku="RUG-001")
        resp = admin_client.post("/api/inventory/add-product", json={"name": "Rug", "sku": "RUG-001"})
        assert resp.status_code == 201

    def test_name_required(self, admin_client, db_session):
        resp = admin_client.post("/api/inventory/add-product", json={"stock": 3})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Product name is required"

    def test_negative_stock_rejected(self, admin_client, db_session):
        resp = admin_client.post("/api/inventory/add-product", json={"name": "Lamp", "stock": -1})
        assert resp.status_code == 400
        assert db.session.query(Product).count() == 0


class TestUpdateProduct:

    def test_rename_and_recategorize(self, admin_client, widget_a):
        resp = admin_client.put(f"/api/inventory/{widget_a.id}", json={"name": "Widget Pro", "category": "Tools"})
        assert resp.status_code == 200
        product = resp.get_json()["product"]
        assert product["product_name"] == "Widget Pro"
        assert product["category"] == "Tools"

    def test_sku_change_follows_inventory(self, admin_client, widget_a):
        resp = admin_client.put(f"/api/inventory/{widget_a.id}", json={"sku": "WID-2"})
        assert resp.status_code == 200
        db.session.expire_all()
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_a.id).one().sku == "WID-2"

    def test_empty_update_rejected(self, admin_client, widget_a):
        resp = admin_client.put(f"/api/inventory/{widget_a.id}", json={})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "No updatable fields supplied"


class TestBulkUpdate:

    def test_updates_known_skus_and_reports_unknown(self, admin_a, admin_client, widget_a):
        gadget = make_product(admin_a.merchant_id, "Gadget", stock=1)
        resp = admin_client.post("/api/inventory/bulk-update", json={"updates": [
            {"sku": "sku-widget", "stockQuantity": 50},
            {"sku": gadget.sku, "stockQuantity": 0},
            {"sku": "NOPE-1", "stockQuantity": 3},
        ]})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["updated"] == 2
        assert body["notFound"] == ["NOPE-1"]
        assert body["message"] == "2 products updated successfully"

        db.session.expire_all()
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_a.id).one().quantity_available == 50
        assert db.session.query(InventoryRecord).filter_by(product_id=gadget.id).one().quantity_available == 0

    def test_negative_quantity_rejects_whole_batch(self, admin_client, widget_a):
        resp = admin_client.post("/api/inventory/bulk-update", json={"updates": [
            {"sku": "SKU-WIDGET", "stockQuantity": 50},
            {"sku": "SKU-WIDGET", "stockQuantity": -5},
        ]})
        assert resp.status_code == 400
        assert "updates[1].stockQuantity must be at least 0" in resp.get_json()["errors"]
        db.session.expire_all()
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_a.id).one().quantity_available == 10

    def test_other_merchant_sku_is_not_found(self, admin_b_client, widget_a):
        resp = admin_b_client.post("/api/inventory/bulk-update", json={"updates": [
            {"sku": widget_a.sku, "stockQuantity": 0},
        ]})
        assert resp.get_json()["notFound"] == [widget_a.sku]
        db.session.expire_all()
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_a.id).one().quantity_available == 10

    def test_empty_updates_rejected(self, admin_client, db_session):
        resp = admin_client.post("/api/inventory/bulk-update", json={"updates": []})
        assert resp.status_code == 400


class TestCostPrice:

    def test_admin_sets_price(self, admin_client, widget_a):
        resp = admin_client.patch(f"/api/inventory/{widget_a.id}/price", json={"unitPrice": "7.25"})
        assert resp.status_code == 200
        assert resp.get_json()["unitPrice"] == 7.25

    def test_negative_price_rejected(self, admin_client, widget_a):
        resp = admin_client.patch(f"/api/inventory/{widget_a.id}/price", json={"unitPrice": -2})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Valid unit price is required"

    def test_unknown_product(self, admin_client, db_session):
        resp = admin_client.patch("/api/inventory/999/price", json={"unitPrice": 2})
        assert resp.status_code == 404


class TestListing:

    def test_low_stock_listing(self, admin_a, admin_client, widget_a):
        make_product(admin_a.merchant_id, "Gadget", stock=2, reorder_level=2)
        make_product(admin_a.merchant_id, "Gizmo", stock=0, reorder_level=5)

        body = admin_client.get("/api/inventory/low-stock").get_json()
        assert body["count"] == 2
        assert [p["product_name"] for p in body["products"]] == ["Gizmo", "Gadget"]
        assert all(p["is_low_stock"] for p in body["products"])

        body = admin_client.get("/api/inventory?lowStock=true").get_json()
        assert body["pagination"]["total"] == 2

    def test_order_can_push_product_into_low_stock(self, admin_client, widget_a):
        manual_order(admin_client, quantity=8)
        body = admin_client.get("/api/inventory/low-stock").get_json()
        assert [p["product_name"] for p in body["products"]] == ["Widget"]

    def test_search_and_pagination(self, admin_a, admin_client, widget_a):
        for i in range(3):
            make_product(admin_a.merchant_id, f"Bolt {i}")

        body = admin_client.get("/api/inventory?search=bolt&limit=2").get_json()
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
        assert len(body["products"]) == 2
