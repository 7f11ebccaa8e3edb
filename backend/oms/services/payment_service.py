# Overview: Service-layer operations for order payments; encapsulates business logic and database work.

"""
Payment recording.

One payment row per order, upserted in place: there is no payment history.
Recording a payment also mirrors status and method onto the order and
overwrites orders.total_amount with the payment amount (the amount defaults
to the order's current total, so an amount-less update leaves it as is).
"""

import logging

from ..cache import TTLCache
from ..errors import NotFoundError
from ..extensions import db
from ..models import Order, OrderPayment
from ..time_utils import utcnow
from ..validation import PaymentUpdate
from .concurrency import lock_for_update, run_with_retry, transaction
from .order_service import invalidate_order_cache

logger = logging.getLogger(__name__)


def record_payment(merchant_id: int, order_id: int, data: PaymentUpdate, cache: TTLCache) -> OrderPayment:
    def _op() -> OrderPayment:
        with transaction():
            order = lock_for_update(
                db.session.query(Order).filter_by(id=order_id, merchant_id=merchant_id)
            ).first()
            if order is None:
                raise NotFoundError("Order not found")

            amount = data.amount if data.amount is not None else order.total_amount
            now = utcnow()

            payment = db.session.query(OrderPayment).filter_by(order_id=order.id).first()
            if payment is None:
                payment = OrderPayment(order_id=order.id)
                db.session.add(payment)
            payment.status = data.status
            payment.payment_method = data.payment_method
            payment.amount = amount
            payment.payment_date = now

            order.payment_status = data.status
            order.payment_method = data.payment_method
            order.total_amount = amount
            order.updated_at = now
            db.session.flush()
        return payment

    payment = run_with_retry(_op)
    invalidate_order_cache(cache, merchant_id)
    logger.info("Payment for order %s set to %s (%s)", order_id, data.status, data.payment_method)
    return payment
