# Overview: Service-layer operations for invoices; encapsulates business logic and database work.

"""
Invoices are a view over orders, not a table of their own: any order that
reached confirmed, shipped or delivered is invoiceable, and its invoice id
is the order id. Payment status doubles as the invoice status.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, Order
from ..time_utils import money, to_utc_z, today
from ..validation import Invalid, InvoiceInput, parse_invoice_row

logger = logging.getLogger(__name__)

INVOICEABLE_STATUSES = ("confirmed", "shipped", "delivered")
DEFAULT_DUE_DAYS = 30


def _invoice_dict(order: Order, customer: Customer | None, due_date=None, status: str | None = None) -> dict:
    payment = order.payment
    due = due_date or (today() + timedelta(days=DEFAULT_DUE_DAYS))
    return {
        "invoice_id": order.id,
        "order_id": order.id,
        "customer_name": customer.name if customer else None,
        "total_amount": money(order.total_amount),
        "status": status or order.payment_status or "pending",
        "due_date": due.isoformat(),
        "order_status": order.status,
        "payment_method": payment.payment_method if payment else order.payment_method,
        "payment_date": to_utc_z(payment.payment_date) if payment else None,
        "created_at": to_utc_z(order.created_at),
    }


def list_invoices(merchant_id: int) -> list[dict]:
    rows = (
        db.session.query(Order, Customer)
        .outerjoin(Customer, Customer.id == Order.customer_id)
        .filter(Order.merchant_id == merchant_id, Order.status.in_(INVOICEABLE_STATUSES))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [_invoice_dict(order, customer) for order, customer in rows]


def _merchant_order(merchant_id: int, order_id: int) -> Order | None:
    return db.session.query(Order).filter_by(id=order_id, merchant_id=merchant_id).first()


def add_manual_invoice(merchant_id: int, data: InvoiceInput) -> dict:
    order = _merchant_order(merchant_id, data.order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return _invoice_dict(order, order.customer, due_date=data.due_date, status=data.status)


def import_invoices(merchant_id: int, rows: list[dict]) -> dict:
    """Validate uploaded invoice rows; rows whose order exists are counted."""
    errors: list[str] = []
    invoices: list[dict] = []
    for index, row in enumerate(rows, start=1):
        result = parse_invoice_row(row)
        if isinstance(result, Invalid):
            errors.append(f"Row {index}: {'; '.join(result.errors)}")
            continue
        order = _merchant_order(merchant_id, result.value.order_id)
        if order is None:
            errors.append(f"Row {index}: order {result.value.order_id} not found")
            continue
        invoices.append(
            _invoice_dict(order, order.customer, due_date=result.value.due_date, status=result.value.status)
        )

    if not invoices and errors:
        raise ValidationError("No valid invoices found in CSV", errors)

    logger.info("Invoice import for merchant %s: %d processed, %d errors", merchant_id, len(invoices), len(errors))
    return {
        "message": f"Successfully processed {len(invoices)} invoices",
        "created": len(invoices),
        "errors": len(errors),
        "errorDetails": errors,
        "invoices": invoices,
    }
