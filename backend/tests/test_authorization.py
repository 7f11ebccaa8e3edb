"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Employee role denied admin-only operations (403)
- Admin role can perform privileged operations
- Role changes take effect for the changed user immediately
"""

import pytest

from conftest import login, make_user, manual_order


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a session or token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/auth/csrf-token"),
            ("GET", "/api/orders"),
            ("POST", "/api/orders"),
            ("POST", "/api/orders/add-manual"),
            ("POST", "/api/orders/upload-csv"),
            ("GET", "/api/orders/1"),
            ("PATCH", "/api/orders/1/status"),
            ("PATCH", "/api/orders/1/payment"),
            ("POST", "/api/orders/assign"),
            ("GET", "/api/employee/orders"),
            ("GET", "/api/employee/assigned-orders"),
            ("PUT", "/api/employee/orders/1/status"),
            ("GET", "/api/inventory"),
            ("GET", "/api/inventory/low-stock"),
            ("POST", "/api/inventory/add-product"),
            ("PUT", "/api/inventory/1"),
            ("POST", "/api/inventory/bulk-update"),
            ("POST", "/api/inventory/upload-csv"),
            ("PATCH", "/api/inventory/1/price"),
            ("GET", "/api/invoices"),
            ("POST", "/api/invoices/add-manual"),
            ("GET", "/api/reports"),
            ("GET", "/api/reports/dashboard"),
            ("GET", "/api/reports/sales"),
            ("GET", "/api/users"),
            ("POST", "/api/users"),
            ("PUT", "/api/users/1/role"),
            ("DELETE", "/api/users/1"),
            ("GET", "/api/profile"),
            ("PUT", "/api/profile"),
            ("PUT", "/api/profile/password"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json() == {"message": "Authentication required"}

    def test_unknown_session_cookie_rejected(self, app, client, db_session):
        client.set_cookie("oms_sid", "0" * 64)
        resp = client.get("/api/orders")
        assert resp.status_code == 401

    def test_unknown_bearer_token_rejected(self, client, db_session):
        resp = client.get("/api/orders", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401

    def test_health_is_public(self, client, db_session):
        assert client.get("/health").status_code == 200


# =============================================================================
# EMPLOYEE DENIED ADMIN OPERATIONS (403)
# =============================================================================


class TestEmployeeDeniedAdminOperations:

    def test_cannot_list_users(self, employee_client):
        resp = employee_client.get("/api/users")
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Admin access required"
        assert resp.get_json()["required_roles"] == ["admin"]

    def test_cannot_create_user(self, employee_client):
        resp = employee_client.post(
            "/api/users",
            json={"username": "x", "email": "x@x.test", "password": "Password123!", "role": "admin"},
        )
        assert resp.status_code == 403

    def test_cannot_change_roles(self, employee_client, employee_a):
        resp = employee_client.put(f"/api/users/{employee_a.id}/role", json={"role": "admin"})
        assert resp.status_code == 403

    def test_cannot_delete_users(self, employee_client, employee_a2):
        resp = employee_client.delete(f"/api/users/{employee_a2.id}")
        assert resp.status_code == 403

    def test_cannot_assign_orders(self, employee_client, employee_a):
        resp = employee_client.post("/api/orders/assign", json={"orderId": 1, "userId": employee_a.id})
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Only admins can assign orders"

    def test_cannot_use_admin_status_route(self, employee_client):
        resp = employee_client.patch("/api/orders/1/status", json={"status": "shipped"})
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Only admins can update order status here"

    def test_cannot_change_cost_price(self, employee_client, widget_a):
        resp = employee_client.patch(f"/api/inventory/{widget_a.id}/price", json={"unitPrice": 1})
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Only admins can change cost prices"

    def test_can_create_orders_and_products(self, employee_client, widget_a):
        assert manual_order(employee_client).status_code == 201
        resp = employee_client.post("/api/inventory/add-product", json={"name": "Gadget", "stock": 3})
        assert resp.status_code == 201


# =============================================================================
# ROLE CHANGES
# =============================================================================


class TestRoleChanges:

    def test_promotion_applies_immediately(self, app, admin_client, employee_a):
        employee_client = login(app, employee_a.email)
        assert employee_client.get("/api/users").status_code == 403

        resp = admin_client.put(f"/api/users/{employee_a.id}/role", json={"role": "admin"})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == "admin"

        assert employee_client.get("/api/users").status_code == 200

    def test_invalid_role_rejected(self, admin_client, employee_a):
        resp = admin_client.put(f"/api/users/{employee_a.id}/role", json={"role": "owner"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid role. Must be one of: admin, manager, employee, pickup"

    @pytest.mark.parametrize("role", ["manager", "pickup"])
    def test_non_admin_roles_are_not_admin(self, app, admin_a, role):
        user = make_user(admin_a.merchant_id, f"user-{role}", role=role)
        client = login(app, user.email)
        assert client.get("/api/users").status_code == 403
        assert client.get("/api/orders").status_code == 200
