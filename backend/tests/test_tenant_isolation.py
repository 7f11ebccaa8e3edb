"""
Tenant isolation tests.

Verifies that Merchant B's users cannot see or modify Merchant A's data:
- Orders (list, detail, status, payment, assignment)
- Products (update, price, order placement by name)
- Users (role change, deletion)
- Reports and invoices
Cross-tenant lookups answer 404, never 403.
"""

from conftest import manual_order

from oms.extensions import db
from oms.models import InventoryRecord, Order, User


class TestOrderIsolation:

    def test_listing_is_scoped(self, admin_client, admin_b_client, widget_a):
        manual_order(admin_client)
        assert admin_b_client.get("/api/orders").get_json()["pagination"]["total"] == 0
        assert admin_client.get("/api/orders").get_json()["pagination"]["total"] == 1

    def test_detail_is_not_found(self, admin_client, admin_b_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_b_client.get(f"/api/orders/{order_id}")
        assert resp.status_code == 404

    def test_status_update_is_not_found(self, admin_client, admin_b_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_b_client.patch(f"/api/orders/{order_id}/status", json={"status": "cancelled"})
        assert resp.status_code == 404
        db.session.expire_all()
        assert db.session.get(Order, order_id).status == "pending"

    def test_payment_update_is_not_found(self, admin_client, admin_b_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_b_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid"})
        assert resp.status_code == 404

    def test_cannot_assign_foreign_order(self, admin_client, admin_b_client, admin_b, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_b_client.post("/api/orders/assign", json={"orderId": order_id, "userId": admin_b.id})
        assert resp.status_code == 404
        db.session.expire_all()
        assert db.session.get(Order, order_id).user_id is None

    def test_order_by_name_uses_own_catalog(self, admin_client, admin_b_client, widget_a, widget_b):
        resp = manual_order(admin_b_client, quantity=2)
        assert resp.status_code == 201
        assert resp.get_json()["totalAmount"] == 40.0

        db.session.expire_all()
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_a.id).one().quantity_available == 10
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_b.id).one().quantity_available == 3

    def test_programmatic_order_cannot_reference_foreign_product(self, admin_b_client, widget_a):
        resp = admin_b_client.post("/api/orders", json={"items": [{"productId": widget_a.id, "quantity": 1}]})
        assert resp.status_code == 400
        db.session.expire_all()
        assert db.session.query(InventoryRecord).filter_by(product_id=widget_a.id).one().quantity_available == 10


class TestProductIsolation:

    def test_listing_is_scoped(self, admin_b_client, widget_a):
        assert admin_b_client.get("/api/inventory").get_json()["pagination"]["total"] == 0

    def test_update_is_not_found(self, admin_b_client, widget_a):
        resp = admin_b_client.put(f"/api/inventory/{widget_a.id}", json={"name": "Hijacked"})
        assert resp.status_code == 404

    def test_price_is_not_found(self, admin_b_client, widget_a):
        resp = admin_b_client.patch(f"/api/inventory/{widget_a.id}/price", json={"unitPrice": 1})
        assert resp.status_code == 404


class TestUserIsolation:

    def test_listing_is_scoped(self, admin_b_client, employee_a):
        emails = [u["email"] for u in admin_b_client.get("/api/users").get_json()["users"]]
        assert emails == ["bob@beta.test"]

    def test_role_change_is_not_found(self, admin_b_client, employee_a):
        resp = admin_b_client.put(f"/api/users/{employee_a.id}/role", json={"role": "admin"})
        assert resp.status_code == 404
        db.session.expire_all()
        assert db.session.get(User, employee_a.id).role == "employee"

    def test_delete_is_not_found(self, admin_b_client, employee_a):
        resp = admin_b_client.delete(f"/api/users/{employee_a.id}")
        assert resp.status_code == 404
        db.session.expire_all()
        assert db.session.get(User, employee_a.id) is not None


class TestReadModelIsolation:

    def test_invoices_are_scoped(self, admin_client, admin_b_client, employee_a, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        admin_client.post("/api/orders/assign", json={"orderId": order_id, "userId": employee_a.id})

        assert len(admin_client.get("/api/invoices").get_json()["invoices"]) == 1
        assert admin_b_client.get("/api/invoices").get_json()["invoices"] == []

        resp = admin_b_client.post("/api/invoices/add-manual", json={"orderId": order_id, "dueDate": "2030-01-01"})
        assert resp.status_code == 404

    def test_dashboard_is_scoped(self, admin_client, admin_b_client, widget_a):
        manual_order(admin_client)
        assert admin_client.get("/api/reports/dashboard").get_json()["pendingOrders"] == 1
        assert admin_b_client.get("/api/reports/dashboard").get_json()["pendingOrders"] == 0
