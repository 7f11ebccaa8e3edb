"""
Payment recording tests.

One payment row per order, upserted; the order's payment fields and total
follow the latest update.
"""

from decimal import Decimal

from conftest import manual_order

from oms.extensions import db
from oms.models import Order, OrderPayment


class TestRecordPayment:

    def test_first_update_creates_payment(self, admin_client, widget_a):
        order_id = manual_order(admin_client, quantity=2).get_json()["orderId"]

        resp = admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid", "paymentMethod": "card"})
        assert resp.status_code == 200
        payment = resp.get_json()["payment"]
        assert payment["status"] == "paid"
        assert payment["payment_method"] == "card"
        assert payment["amount"] == 20.0

        db.session.expire_all()
        order = db.session.get(Order, order_id)
        assert order.payment_status == "paid"
        assert order.payment_method == "card"

    def test_second_update_overwrites_in_place(self, admin_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "pending"})
        admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid", "amount": "7.50"})

        db.session.expire_all()
        payments = db.session.query(OrderPayment).filter_by(order_id=order_id).all()
        assert len(payments) == 1
        assert payments[0].status == "paid"
        assert payments[0].amount == Decimal("7.50")

    def test_amount_overwrites_order_total(self, admin_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid", "amount": 12})

        db.session.expire_all()
        assert db.session.get(Order, order_id).total_amount == Decimal("12.00")

    def test_method_defaults_to_cash(self, admin_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid"})
        assert resp.get_json()["payment"]["payment_method"] == "cash"

    def test_invalid_status_rejected(self, admin_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "sort-of"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == (
            "Invalid payment status. Must be one of: pending, paid, failed, refunded"
        )
        db.session.expire_all()
        assert db.session.query(OrderPayment).count() == 0

    def test_negative_amount_rejected(self, admin_client, widget_a):
        order_id = manual_order(admin_client).get_json()["orderId"]
        resp = admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid", "amount": -1})
        assert resp.status_code == 400

    def test_unknown_order(self, admin_client, db_session):
        resp = admin_client.patch("/api/orders/4242/payment", json={"status": "paid"})
        assert resp.status_code == 404

    def test_payment_shows_in_listing(self, admin_client, widget_a):
        order_id = manual_order(admin_client, quantity=3).get_json()["orderId"]
        assert admin_client.get("/api/orders").get_json()["orders"][0]["paid_amount"] == 0.0

        admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid", "paymentMethod": "upi"})
        row = admin_client.get("/api/orders").get_json()["orders"][0]
        assert row["payment_status"] == "paid"
        assert row["payment_method"] == "upi"
        assert row["paid_amount"] == 30.0
