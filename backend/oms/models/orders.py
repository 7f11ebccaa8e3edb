from __future__ import annotations

from ..extensions import db
from ..time_utils import money, to_utc_z, utcnow


class Order(db.Model):
    """
    Central aggregate of the order lifecycle.

    MULTI-TENANT: merchant_id is required and every lookup filters on it.
    user_id is the assignee (who fulfills it), nullable until assigned.

    STATUS: pending -> assigned/confirmed -> processing -> shipped -> delivered,
    with cancelled reachable from any non-terminal state. Every change to
    status is paired with an OrderStatusHistory row in the same transaction.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_merchant_status", "merchant_id", "status"),
        db.Index("ix_orders_merchant_user", "merchant_id", "user_id"),
        db.Index("ix_orders_merchant_created", "merchant_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("merchants.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    order_source = db.Column(db.String(32), nullable=False, default="Manual")
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="pending")
    payment_status = db.Column(db.String(16), nullable=False, default="pending")
    payment_method = db.Column(db.String(16), nullable=True)
    delivery_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    customer = db.relationship("Customer")
    assignee = db.relationship("User")
    items = db.relationship("OrderItem", back_populates="order", lazy="selectin", order_by="OrderItem.id")
    payment = db.relationship("OrderPayment", uselist=False, back_populates="order")

    def __repr__(self) -> str:
        return f"<Order id={self.id} merchant_id={self.merchant_id} status={self.status}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "order_id": self.id,
            "merchant_id": self.merchant_id,
            "customer_id": self.customer_id,
            "user_id": self.user_id,
            "order_source": self.order_source,
            "total_amount": money(self.total_amount),
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "delivery_notes": self.delivery_notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItem(db.Model):
    """
    Line of an order. price_per_unit and total_price are a point-in-time
    snapshot; later price changes on the product never touch them.
    """
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    sku = db.Column(db.String(100), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    price_per_unit = db.Column(db.Numeric(12, 2), nullable=False)
    total_price = db.Column(db.Numeric(12, 2), nullable=False)

    order = db.relationship("Order", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "item_id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "sku": self.sku,
            "quantity": self.quantity,
            "price_per_unit": money(self.price_per_unit),
            "total_price": money(self.total_price),
        }


class OrderStatusHistory(db.Model):
    """
    Append-only audit row per status transition.

    Never updated or deleted; rows outlive any notion of "current" status.
    """
    __tablename__ = "order_status_history"
    __table_args__ = (
        db.Index("ix_order_status_history_order", "order_id", "changed_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    old_status = db.Column(db.String(16), nullable=True)
    new_status = db.Column(db.String(16), nullable=False)
    changed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    changed_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "history_id": self.id,
            "order_id": self.order_id,
            "old_status": self.old_status,
            "new_status": self.new_status,
            "changed_by": self.changed_by,
            "changed_at": to_utc_z(self.changed_at),
        }


class OrderPayment(db.Model):
    """
    At most one payment row per order, upserted on every payment update.

    Not a ledger: earlier payment states are overwritten.
    """
    __tablename__ = "order_payments"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_order_payments_order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending")
    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    order = db.relationship("Order", back_populates="payment")

    def to_dict(self) -> dict:
        return {
            "payment_id": self.id,
            "order_id": self.order_id,
            "status": self.status,
            "payment_method": self.payment_method,
            "amount": money(self.amount),
            "payment_date": to_utc_z(self.payment_date),
        }
