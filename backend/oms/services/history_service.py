# Overview: Service-layer operations for the order status audit trail.

"""
Append-only history of order status transitions.

The history row is written in the same transaction as the status write.
append_status_change only flushes; the caller's transaction() commits both or neither.
"""

from ..extensions import db
from ..models import Order, OrderStatusHistory
from ..time_utils import utcnow


def append_status_change(order: Order, old_status: str | None, new_status: str, changed_by: int | None) -> OrderStatusHistory:
    row = OrderStatusHistory(
        order_id=order.id,
        old_status=old_status,
        new_status=new_status,
        changed_by=changed_by,
        changed_at=utcnow(),
    )
    db.session.add(row)
    db.session.flush()
    return row


def list_order_history(order_id: int) -> list[OrderStatusHistory]:
    return (
        db.session.query(OrderStatusHistory)
        .filter_by(order_id=order_id)
        .order_by(OrderStatusHistory.changed_at.asc(), OrderStatusHistory.id.asc())
        .all()
    )
