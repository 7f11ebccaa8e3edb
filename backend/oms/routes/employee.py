# Overview: Flask API routes for employee order views; parses input and returns JSON responses.

"""
Employee-facing order routes.

SECURITY: Every route is scoped to orders assigned to the caller. An order
that exists but is assigned to someone else answers 404, exactly like an
order that does not exist.
"""

from flask import Blueprint, g, jsonify, request

from ..cache import get_cache
from ..decorators import require_auth
from ..errors import OmsError, error_response, internal_error_response
from ..services import order_service
from ..validation import EMPLOYEE_ORDER_STATUSES, parse_status_update, unwrap

employee_bp = Blueprint("employee", __name__, url_prefix="/api/employee")


@employee_bp.get("/orders")
@require_auth
def my_orders_route():
    try:
        orders = order_service.list_assigned_orders(g.merchant_id, g.user_id)
        return jsonify({"orders": orders})
    except Exception as e:
        return internal_error_response(e, "Failed to fetch employee orders")


@employee_bp.get("/assigned-orders")
@require_auth
def assigned_orders_route():
    """Orders assigned to the caller that are out for delivery (shipped)."""
    try:
        orders = order_service.list_assigned_orders(g.merchant_id, g.user_id, status="shipped")
        return jsonify({"orders": orders})
    except Exception as e:
        return internal_error_response(e, "Failed to fetch assigned orders")


@employee_bp.put("/orders/<int:order_id>/status")
@require_auth
def update_my_order_status_route(order_id: int):
    try:
        status = unwrap(parse_status_update(request.get_json(silent=True), EMPLOYEE_ORDER_STATUSES))
        order = order_service.update_status(
            g.merchant_id, g.user_id, order_id, status, get_cache(), assigned_only=True
        )
        return jsonify({
            "message": "Order status updated successfully",
            "orderId": order.id,
            "status": order.status,
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update order status")
