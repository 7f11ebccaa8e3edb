# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Lifecycle Engine.

TRANSACTIONS: order writes span customers, orders, order_items, inventory
and order_status_history. Each operation below is one transaction() block;
a failure at any step leaves neither a partial order nor a stock decrement.

STATE MACHINE:
    pending -> assigned/confirmed -> processing -> shipped -> delivered
    cancelled is reachable from any non-terminal state.
    delivered and cancelled end the normal flow, but updates only check that
    the target status is a known one; no transition out of them is blocked.

STOCK: reservations go through inventory_service.reserve_stock(), a single
conditional UPDATE, so concurrent orders cannot oversell.

AUDIT: every status write appends exactly one OrderStatusHistory row in the
same transaction.

MULTI-TENANT: every lookup filters on merchant_id. Orders outside the
caller's merchant (or, for non-admins, not assigned to the caller) resolve
to NotFoundError.

CACHING: order listings are cached per merchant under "orders:{merchant_id}:"
and dropped after every committed order write.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from flask import current_app
from sqlalchemy import String, cast
from sqlalchemy.exc import DataError, IntegrityError

from ..cache import TTLCache
from ..errors import NotFoundError, OmsError, ValidationError
from ..extensions import db
from ..models import Customer, Order, OrderItem, User
from ..time_utils import money, utcnow
from ..validation import (
    AssignRequest,
    CreateOrderRequest,
    CustomerInput,
    Invalid,
    ManualOrderRequest,
    OrderListQuery,
    parse_order_row,
)
from . import history_service, inventory_service
from .concurrency import lock_for_update, run_with_retry, savepoint, transaction

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def order_cache_prefix(merchant_id: int) -> str:
    return f"orders:{merchant_id}:"


def invalidate_order_cache(cache: TTLCache, merchant_id: int) -> None:
    cache.invalidate_prefix(order_cache_prefix(merchant_id))


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def find_or_create_customer(merchant_id: int, data: CustomerInput) -> Customer:
    """Reuse the merchant's customer with the same phone, else insert one."""
    if data.phone:
        customer = db.session.query(Customer).filter_by(merchant_id=merchant_id, phone=data.phone).first()
        if customer:
            return customer
    customer = Customer(
        merchant_id=merchant_id,
        name=data.name,
        phone=data.phone,
        email=data.email,
        address=data.address,
    )
    db.session.add(customer)
    db.session.flush()
    return customer


def _resolve_price(cost_price: Decimal | None, fallback: Decimal | None) -> Decimal:
    # Inventory cost wins; the caller's price only fills in when no cost is set
    if cost_price:
        return Decimal(cost_price).quantize(CENTS)
    return (fallback or Decimal("0")).quantize(CENTS)


def _reserve_or_fail(product_name: str, inventory_id: int, quantity: int) -> None:
    if not inventory_service.reserve_stock(inventory_id, quantity):
        available = inventory_service.available_quantity(inventory_id)
        raise ValidationError(
            f'Insufficient stock for "{product_name}". Available: {available}, Required: {quantity}'
        )


def _place_order(merchant_id: int, data: ManualOrderRequest) -> Order:
    """
    Steps shared by manual entry and upload rows. Never commits; raises
    ValidationError for unknown products or insufficient stock.
    """
    customer = find_or_create_customer(merchant_id, data.customer)

    stock = inventory_service.find_stock_by_name(merchant_id, data.product_name)
    if stock is None:
        raise ValidationError(
            f'Product "{data.product_name}" not found in inventory. Please add it to inventory first.'
        )
    product, inventory = stock
    price = _resolve_price(inventory.cost_price, data.unit_price)
    line_total = (price * data.quantity).quantize(CENTS)

    order = Order(
        merchant_id=merchant_id,
        customer_id=customer.id,
        order_source=data.order_source,
        total_amount=line_total,
        status="pending",
        payment_status="pending",
    )
    db.session.add(order)
    db.session.flush()

    _reserve_or_fail(data.product_name, inventory.id, data.quantity)

    db.session.add(OrderItem(
        order_id=order.id,
        product_id=product.id,
        sku=product.sku,
        quantity=data.quantity,
        price_per_unit=price,
        total_price=line_total,
    ))
    db.session.flush()
    return order


def create_manual_order(merchant_id: int, data: ManualOrderRequest, cache: TTLCache) -> Order:
    """
    Create a single order; any failure rolls back the customer upsert too.
    """
    with transaction():
        order = _place_order(merchant_id, data)
    invalidate_order_cache(cache, merchant_id)
    logger.info("Manual order %s created for merchant %s", order.id, merchant_id)
    return order


def create_order(merchant_id: int, data: CreateOrderRequest, cache: TTLCache) -> Order:
    """
    Programmatic multi-line order. Products are referenced by id; every line
    must reserve its stock or the whole order is rolled back.
    """
    with transaction():
        customer = find_or_create_customer(merchant_id, data.customer) if data.customer else None
        order = Order(
            merchant_id=merchant_id,
            customer_id=customer.id if customer else None,
            order_source=data.channel,
            total_amount=Decimal("0.00"),
            status="pending",
            payment_status="pending",
        )
        db.session.add(order)
        db.session.flush()

        total = Decimal("0.00")
        for line in data.items:
            stock = inventory_service.find_stock_by_id(merchant_id, line.product_id)
            if stock is None:
                raise ValidationError(
                    f"Product {line.product_id} not found in inventory. Please add it to inventory first."
                )
            product, inventory = stock
            price = _resolve_price(inventory.cost_price, line.unit_price)
            line_total = (price * line.quantity).quantize(CENTS)
            _reserve_or_fail(product.product_name, inventory.id, line.quantity)
            db.session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                sku=product.sku,
                quantity=line.quantity,
                price_per_unit=price,
                total_price=line_total,
            ))
            total += line_total

        order.total_amount = total
        db.session.flush()

    invalidate_order_cache(cache, merchant_id)
    logger.info("Order %s created via %s for merchant %s", order.id, data.channel, merchant_id)
    return order


def import_orders(merchant_id: int, rows: list[dict], cache: TTLCache) -> dict:
    """
    Bulk order creation from upload rows.

    Unlike create_manual_order, a failing row does not abort the upload:
    its error is collected and its savepoint rolled back, so only the rows
    that fully succeeded persist. The upload commits once at the end.
    """
    errors: list[str] = []
    parsed: list[ManualOrderRequest] = []
    for row in rows:
        result = parse_order_row(row)
        if isinstance(result, Invalid):
            errors.extend(result.errors)
        else:
            parsed.append(result.value)

    if not parsed:
        raise ValidationError("No valid orders found in CSV", errors or ["File contains no rows"])

    created: list[Order] = []
    with transaction():
        for data in parsed:
            try:
                with savepoint():
                    created.append(_place_order(merchant_id, data))
            except OmsError as exc:
                errors.append(exc.message)
            except (IntegrityError, DataError):
                errors.append(f"Error creating order for {data.customer.name}: duplicate or invalid values")

    if created:
        invalidate_order_cache(cache, merchant_id)
    logger.info(
        "Order import for merchant %s: %d rows, %d created, %d errors",
        merchant_id, len(parsed), len(created), len(errors),
    )
    return {
        "message": f"Successfully processed {len(created)} orders",
        "created": len(created),
        "errors": len(errors),
        "errorDetails": errors,
    }


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def update_status(
    merchant_id: int,
    actor_id: int,
    order_id: int,
    new_status: str,
    cache: TTLCache,
    *,
    assigned_only: bool = False,
) -> Order:
    """
    Move an order to new_status and record the transition.

    assigned_only scopes the lookup to orders assigned to actor_id; a
    non-owner then simply does not find the order.
    """
    not_found = "Order not found or not assigned to you" if assigned_only else "Order not found"

    def _op() -> Order:
        with transaction():
            query = db.session.query(Order).filter_by(id=order_id, merchant_id=merchant_id)
            if assigned_only:
                query = query.filter_by(user_id=actor_id)
            order = lock_for_update(query).first()
            if order is None:
                raise NotFoundError(not_found)

            old_status = order.status
            order.status = new_status
            order.updated_at = utcnow()
            history_service.append_status_change(order, old_status, new_status, actor_id)
        return order

    order = run_with_retry(_op)
    invalidate_order_cache(cache, merchant_id)
    logger.info("Order %s status changed to %s by user %s", order.id, new_status, actor_id)
    return order


def assign_order(merchant_id: int, actor_id: int, data: AssignRequest, cache: TTLCache) -> Order:
    """
    Assign an order to a user of the same merchant and confirm it.

    Sets user_id and delivery notes, moves status to confirmed and appends
    one history row (old -> confirmed).
    """
    def _op() -> Order:
        with transaction():
            order = lock_for_update(
                db.session.query(Order).filter_by(id=data.order_id, merchant_id=merchant_id)
            ).first()
            if order is None:
                raise NotFoundError("Order not found")
            assignee = db.session.query(User).filter_by(id=data.user_id, merchant_id=merchant_id).first()
            if assignee is None:
                raise NotFoundError("User not found")

            old_status = order.status
            order.user_id = assignee.id
            if data.delivery_notes is not None:
                order.delivery_notes = data.delivery_notes
            order.status = "confirmed"
            order.updated_at = utcnow()
            history_service.append_status_change(order, old_status, "confirmed", actor_id)
        return order

    order = run_with_retry(_op)
    invalidate_order_cache(cache, merchant_id)
    logger.info("Order %s assigned to user %s by %s", order.id, data.user_id, actor_id)
    return order


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def _order_row(order: Order, customer: Customer | None) -> dict:
    data = order.to_dict()
    data["customer_name"] = customer.name if customer else None
    data["customer_phone"] = customer.phone if customer else None
    data["customer_email"] = customer.email if customer else None
    payment = order.payment
    data["paid_amount"] = money(payment.amount) if payment else 0.0
    if payment:
        data["payment_method"] = payment.payment_method
    return data


def list_orders(merchant_id: int, user_id: int, is_admin: bool, query: OrderListQuery, cache: TTLCache) -> dict:
    """
    Paged order listing. Admins see every merchant order, others only the
    orders assigned to them.
    """
    scope = "all" if is_admin else f"user{user_id}"
    key = f"{order_cache_prefix(merchant_id)}{scope}:{query.cache_key()}"
    cached = cache.get(key)
    if cached is not None:
        return cached

    q = (
        db.session.query(Order, Customer)
        .outerjoin(Customer, Customer.id == Order.customer_id)
        .filter(Order.merchant_id == merchant_id)
    )
    if not is_admin:
        q = q.filter(Order.user_id == user_id)
    if query.status:
        q = q.filter(Order.status == query.status)
    if query.channel:
        q = q.filter(Order.order_source == query.channel)
    if query.search:
        q = q.filter(cast(Order.id, String).ilike(f"%{query.search}%"))

    total = q.count()
    rows = q.order_by(Order.id.desc()).offset(query.offset).limit(query.limit).all()

    result = {
        "orders": [_order_row(order, customer) for order, customer in rows],
        "pagination": {
            "page": query.page,
            "limit": query.limit,
            "total": total,
            "totalPages": (total + query.limit - 1) // query.limit,
        },
    }
    cache.set(key, result, ttl=current_app.config.get("ORDER_LIST_CACHE_TTL", 30))
    return result


def get_order(merchant_id: int, order_id: int, user_id: int | None = None) -> Order:
    query = db.session.query(Order).filter_by(id=order_id, merchant_id=merchant_id)
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    order = query.first()
    if order is None:
        raise NotFoundError("Order not found")
    return order


def get_order_detail(merchant_id: int, order_id: int, user_id: int, is_admin: bool) -> dict:
    order = get_order(merchant_id, order_id, None if is_admin else user_id)
    data = _order_row(order, order.customer)
    data["items"] = [item.to_dict() for item in order.items]
    data["payment"] = order.payment.to_dict() if order.payment else None
    data["history"] = [row.to_dict() for row in history_service.list_order_history(order.id)]
    return data


def list_assigned_orders(merchant_id: int, user_id: int, status: str | None = None) -> list[dict]:
    q = (
        db.session.query(Order, Customer)
        .outerjoin(Customer, Customer.id == Order.customer_id)
        .filter(Order.merchant_id == merchant_id, Order.user_id == user_id)
    )
    if status:
        q = q.filter(Order.status == status)
    rows = q.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [_order_row(order, customer) for order, customer in rows]
