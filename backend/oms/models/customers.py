from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Customer(db.Model):
    """
    Merchant-scoped customer, deduplicated by (merchant_id, phone).

    Created lazily the first time an order references a new phone number.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("merchant_id", "phone", name="uq_customers_merchant_phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("merchants.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    # NULL for walk-in rows that carry no phone; those are never deduplicated
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "customer_id": self.id,
            "merchant_id": self.merchant_id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
        }
