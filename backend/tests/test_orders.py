# Overview: Pytest coverage for order creation, stock reservation and listing.

"""
Order creation tests.

Covers:
- Manual order happy path and the insufficient-stock rejection
- Full rollback when stock or product lookup fails
- Price snapshot on order items
- Programmatic multi-line orders
- Listing scope, pagination clamping and cache invalidation
"""

from decimal import Decimal

from conftest import login, make_product, manual_order

from oms.extensions import db
from oms.models import Customer, InventoryRecord, Order, OrderItem


def _stock(product_id: int) -> int:
    db.session.expire_all()
    return db.session.query(InventoryRecord).filter_by(product_id=product_id).one().quantity_available


class TestManualOrder:

    def test_widget_scenario(self, db_session, admin_a, admin_client):
        widget = make_product(admin_a.merchant_id, "Widget", stock=10, reorder_level=2, cost_price=Decimal("5.00"))

        resp = manual_order(admin_client, quantity=3)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["totalAmount"] == 15.0
        assert body["order"]["total_amount"] == 15.0
        assert body["order"]["status"] == "pending"
        assert [(i["quantity"], i["price_per_unit"]) for i in body["order"]["items"]] == [(3, 5.0)]
        assert _stock(widget.id) == 7

        order = db.session.get(Order, resp.get_json()["orderId"])
        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert order.total_amount == Decimal("15.00")

        resp = manual_order(admin_client, quantity=8)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == 'Insufficient stock for "Widget". Available: 7, Required: 8'
        assert _stock(widget.id) == 7

    def test_insufficient_stock_leaves_no_rows(self, db_session, admin_a, admin_client, widget_a):
        resp = manual_order(admin_client, quantity=11, phone="555-7777")
        assert resp.status_code == 400

        db.session.expire_all()
        assert db.session.query(Order).count() == 0
        assert db.session.query(OrderItem).count() == 0
        assert db.session.query(Customer).filter_by(phone="555-7777").count() == 0
        assert _stock(widget_a.id) == 10

    def test_unknown_product_rolls_back_customer(self, db_session, admin_client, widget_a):
        resp = manual_order(admin_client, product_name="Gadget", phone="555-8888")
        assert resp.status_code == 400
        assert resp.get_json()["message"] == (
            'Product "Gadget" not found in inventory. Please add it to inventory first.'
        )
        db.session.expire_all()
        assert db.session.query(Customer).filter_by(phone="555-8888").count() == 0
        assert db.session.query(Order).count() == 0

    def test_exact_stock_can_be_ordered(self, db_session, admin_client, widget_a):
        resp = manual_order(admin_client, quantity=10)
        assert resp.status_code == 201
        assert _stock(widget_a.id) == 0

    def test_cost_price_wins_over_caller_price(self, db_session, admin_client, widget_a):
        resp = manual_order(admin_client, quantity=2, unitPrice=99)
        assert resp.status_code == 201
        assert resp.get_json()["totalAmount"] == 20.0

    def test_caller_price_used_without_cost_price(self, db_session, admin_a, admin_client):
        make_product(admin_a.merchant_id, "Gizmo", stock=5, cost_price=None)
        resp = manual_order(admin_client, product_name="Gizmo", quantity=2, unitPrice="4.50")
        assert resp.status_code == 201
        assert resp.get_json()["totalAmount"] == 9.0

    def test_customer_reused_by_phone(self, db_session, admin_client, widget_a):
        manual_order(admin_client, phone="555-1234")
        manual_order(admin_client, phone="555-1234")
        db.session.expire_all()
        assert db.session.query(Customer).filter_by(phone="555-1234").count() == 1
        assert db.session.query(Order).count() == 2

    def test_missing_fields_rejected(self, db_session, admin_client, widget_a):
        resp = admin_client.post('/api/orders/add-manual', json={'customerName': 'Carol'})
        assert resp.status_code == 400
        errors = resp.get_json()["errors"]
        assert "productName is required" in errors
        assert "quantity is required" in errors

    def test_zero_quantity_rejected(self, db_session, admin_client, widget_a):
        resp = manual_order(admin_client, quantity=0)
        assert resp.status_code == 400
        assert _stock(widget_a.id) == 10


class TestPriceSnapshot:

    def test_price_change_does_not_touch_existing_items(self, db_session, admin_client, widget_a):
        resp = manual_order(admin_client, quantity=2)
        order_id = resp.get_json()["orderId"]

        resp = admin_client.patch(f'/api/inventory/{widget_a.id}/price', json={'unitPrice': 42})
        assert resp.status_code == 200

        db.session.expire_all()
        item = db.session.query(OrderItem).filter_by(order_id=order_id).one()
        assert item.price_per_unit == Decimal("10.00")
        assert item.total_price == Decimal("20.00")

        resp = manual_order(admin_client, quantity=1)
        assert resp.get_json()["totalAmount"] == 42.0


class TestProgrammaticOrder:

    def test_multi_line_order(self, db_session, admin_a, admin_client, widget_a):
        gadget = make_product(admin_a.merchant_id, "Gadget", stock=4, cost_price=Decimal("2.50"))
        resp = admin_client.post('/api/orders', json={
            'channel': 'WhatsApp',
            'items': [
                {'productId': widget_a.id, 'quantity': 2},
                {'productId': gadget.id, 'quantity': 4},
            ],
            'customer': {'name': 'Dana', 'phone': '555-4444'},
        })
        assert resp.status_code == 201
        order = resp.get_json()["order"]
        assert order["order_source"] == "WhatsApp"
        assert order["total_amount"] == 30.0
        assert len(order["items"]) == 2
        assert _stock(widget_a.id) == 8
        assert _stock(gadget.id) == 0

    def test_one_failing_line_rolls_back_every_line(self, db_session, admin_a, admin_client, widget_a):
        gadget = make_product(admin_a.merchant_id, "Gadget", stock=1)
        resp = admin_client.post('/api/orders', json={
            'items': [
                {'productId': widget_a.id, 'quantity': 2},
                {'productId': gadget.id, 'quantity': 5},
            ],
        })
        assert resp.status_code == 400
        assert _stock(widget_a.id) == 10
        assert _stock(gadget.id) == 1
        db.session.expire_all()
        assert db.session.query(Order).count() == 0

    def test_empty_items_rejected(self, db_session, admin_client):
        resp = admin_client.post('/api/orders', json={'items': []})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "items must be a non-empty list"


class TestOrderListing:

    def test_admin_sees_all_employee_sees_assigned(self, app, db_session, admin_a, employee_a, admin_client, widget_a):
        first = manual_order(admin_client).get_json()["orderId"]
        manual_order(admin_client)
        admin_client.post('/api/orders/assign', json={'orderId': first, 'userId': employee_a.id})

        resp = admin_client.get('/api/orders')
        assert resp.status_code == 200
        assert resp.get_json()["pagination"]["total"] == 2

        employee_client = login(app, employee_a.email)
        resp = employee_client.get('/api/orders')
        orders = resp.get_json()["orders"]
        assert [o["order_id"] for o in orders] == [first]

    def test_pagination_is_clamped(self, db_session, admin_client, widget_a):
        for _ in range(3):
            manual_order(admin_client)

        body = admin_client.get('/api/orders?page=0&limit=500').get_json()
        assert body["pagination"]["page"] == 1
        assert body["pagination"]["limit"] == 20

        body = admin_client.get('/api/orders?page=2&limit=2').get_json()
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}
        assert len(body["orders"]) == 1

    def test_filters_and_search(self, db_session, admin_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        manual_order(admin_client, orderSource="WhatsApp")

        body = admin_client.get('/api/orders?channel=WhatsApp').get_json()
        assert body["pagination"]["total"] == 1
        assert body["orders"][0]["order_source"] == "WhatsApp"

        body = admin_client.get('/api/orders?status=all&channel=all').get_json()
        assert body["pagination"]["total"] == 2

        body = admin_client.get(f'/api/orders?search={order_id}').get_json()
        assert order_id in [o["order_id"] for o in body["orders"]]

    def test_listing_cache_invalidated_by_writes(self, db_session, admin_client, widget_a):
        assert admin_client.get('/api/orders').get_json()["pagination"]["total"] == 0
        manual_order(admin_client)
        assert admin_client.get('/api/orders').get_json()["pagination"]["total"] == 1

    def test_order_detail_includes_items_and_history(self, db_session, admin_client, widget_a):
        order_id = manual_order(admin_client, quantity=2).get_json()["orderId"]
        admin_client.patch(f'/api/orders/{order_id}/status', json={'status': 'processing'})

        detail = admin_client.get(f'/api/orders/{order_id}').get_json()["order"]
        assert detail["customer_name"] == "Carol"
        assert detail["items"][0]["quantity"] == 2
        assert [h["new_status"] for h in detail["history"]] == ["processing"]
        assert detail["payment"] is None
