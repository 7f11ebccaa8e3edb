"""
Invoice view tests. Invoices are derived from confirmed, shipped and
delivered orders.
"""

from datetime import timedelta

from conftest import manual_order

from oms.time_utils import today


def _order(client, status=None, **extra):
    order_id = manual_order(client, **extra).get_json()["orderId"]
    if status:
        client.patch(f"/api/orders/{order_id}/status", json={"status": status})
    return order_id


class TestListInvoices:

    def test_only_invoiceable_orders(self, admin_client, widget_a):
        confirmed = _order(admin_client, "confirmed", quantity=2)
        _order(admin_client)
        _order(admin_client, "cancelled")
        shipped = _order(admin_client, "shipped")

        invoices = admin_client.get("/api/invoices").get_json()["invoices"]
        assert sorted(i["invoice_id"] for i in invoices) == sorted([confirmed, shipped])

        by_id = {i["order_id"]: i for i in invoices}
        assert by_id[confirmed]["total_amount"] == 20.0
        assert by_id[confirmed]["customer_name"] == "Carol"
        assert by_id[confirmed]["status"] == "pending"
        assert by_id[confirmed]["due_date"] == (today() + timedelta(days=30)).isoformat()

    def test_payment_status_is_invoice_status(self, admin_client, widget_a):
        order_id = _order(admin_client, "delivered")
        admin_client.patch(f"/api/orders/{order_id}/payment", json={"status": "paid", "paymentMethod": "card"})

        invoice = admin_client.get("/api/invoices").get_json()["invoices"][0]
        assert invoice["status"] == "paid"
        assert invoice["payment_method"] == "card"
        assert invoice["payment_date"] is not None


class TestManualInvoice:

    def test_creates_invoice_for_order(self, admin_client, widget_a):
        order_id = _order(admin_client)
        resp = admin_client.post("/api/invoices/add-manual", json={
            "orderId": order_id,
            "dueDate": "2030-06-30",
            "status": "paid",
        })
        assert resp.status_code == 201
        invoice = resp.get_json()["invoice"]
        assert invoice["order_id"] == order_id
        assert invoice["due_date"] == "2030-06-30"
        assert invoice["status"] == "paid"

    def test_unknown_order(self, admin_client, db_session):
        resp = admin_client.post("/api/invoices/add-manual", json={"orderId": 77, "dueDate": "2030-06-30"})
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Order not found"

    def test_due_date_required(self, admin_client, widget_a):
        order_id = _order(admin_client)
        resp = admin_client.post("/api/invoices/add-manual", json={"orderId": order_id})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "dueDate is required"
