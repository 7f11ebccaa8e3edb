# Overview: Flask API routes for orders; parses input and returns JSON responses.

"""
Order routes.

SECURITY: All routes require authentication.
- Listing and detail: admins see every merchant order, other roles only the
  orders assigned to them
- Status changes through this blueprint and assignment are admin only
- Employees change status through /api/employee (assigned orders only)

MULTI-TENANT: merchant_id always comes from g (the resolved identity), never
from the request.
"""

from flask import Blueprint, g, jsonify, request

from ..cache import get_cache
from ..decorators import require_admin, require_auth
from ..errors import OmsError, ValidationError, error_response, internal_error_response
from ..services import order_service, payment_service
from ..uploads import read_upload
from ..validation import (
    ADMIN_ORDER_STATUSES,
    parse_assign,
    parse_create_order,
    parse_manual_order,
    parse_order_list_query,
    parse_payment_update,
    parse_status_update,
    unwrap,
)

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@orders_bp.get("/")
@require_auth
def list_orders_route():
    """
    Paged order listing.

    Query params: page, limit, status, channel, search ("all" means no filter).
    """
    try:
        query = parse_order_list_query(request.args)
        result = order_service.list_orders(
            g.merchant_id, g.user_id, g.identity.is_admin, query, get_cache()
        )
        return jsonify(result)
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to fetch orders")


@orders_bp.post("")
@orders_bp.post("/")
@require_auth
def create_order_route():
    """Programmatic order: {channel, items: [{productId, quantity, unitPrice?}], customer?}."""
    try:
        data = unwrap(parse_create_order(request.get_json(silent=True)))
        order = order_service.create_order(g.merchant_id, data, get_cache())
        return jsonify({
            "message": "Order created successfully",
            "orderId": order.id,
            "order": order.to_dict(include_items=True),
        }), 201
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to create order")


@orders_bp.post("/add-manual")
@require_auth
def add_manual_order_route():
    try:
        data = unwrap(parse_manual_order(request.get_json(silent=True)))
        order = order_service.create_manual_order(g.merchant_id, data, get_cache())
        return jsonify({
            "message": "Order created successfully",
            "orderId": order.id,
            "totalAmount": float(order.total_amount),
            "order": order.to_dict(include_items=True),
        }), 201
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to create manual order")


@orders_bp.post("/upload-csv")
@require_auth
def upload_orders_route():
    """
    Bulk order upload (CSV, JSON or Excel).

    Columns: customer_name, customer_phone, customer_email, customer_address,
    product_name, quantity, unit_price, order_source (Title Case accepted).
    Failing rows are reported, successful rows persist.
    """
    try:
        file = request.files.get("file")
        if not file:
            raise ValidationError("No file uploaded")
        rows = read_upload(file)
        result = order_service.import_orders(g.merchant_id, rows, get_cache())
        return jsonify(result)
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to process order upload")


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    """Order with items, payment and status history."""
    try:
        detail = order_service.get_order_detail(
            g.merchant_id, order_id, g.user_id, g.identity.is_admin
        )
        return jsonify({"order": detail})
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to fetch order")


@orders_bp.patch("/<int:order_id>/status")
@require_auth
@require_admin(message="Only admins can update order status here")
def update_order_status_route(order_id: int):
    try:
        status = unwrap(parse_status_update(request.get_json(silent=True), ADMIN_ORDER_STATUSES))
        order = order_service.update_status(g.merchant_id, g.user_id, order_id, status, get_cache())
        return jsonify({
            "message": "Order status updated successfully",
            "orderId": order.id,
            "status": order.status,
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update order status")


@orders_bp.patch("/<int:order_id>/payment")
@require_auth
def update_payment_route(order_id: int):
    """
    Record the order's payment: {status, paymentMethod?, amount?}.

    Any authenticated user of the merchant may record a payment.
    """
    try:
        data = unwrap(parse_payment_update(request.get_json(silent=True)))
        payment = payment_service.record_payment(g.merchant_id, order_id, data, get_cache())
        return jsonify({
            "message": "Payment status updated successfully",
            "payment": payment.to_dict(),
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update payment status")


@orders_bp.post("/assign")
@require_auth
@require_admin(message="Only admins can assign orders")
def assign_order_route():
    """Assign {orderId, userId, deliveryNotes?}; the order becomes confirmed."""
    try:
        data = unwrap(parse_assign(request.get_json(silent=True)))
        order = order_service.assign_order(g.merchant_id, g.user_id, data, get_cache())
        return jsonify({
            "message": "Order assigned successfully",
            "orderId": order.id,
            "userId": order.user_id,
            "status": order.status,
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to assign order")
