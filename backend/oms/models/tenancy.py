from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Merchant(db.Model):
    """
    Multi-tenant root: every tenant is a Merchant.

    Users, products, inventory, customers and orders all carry merchant_id
    and every query is scoped by it. Created once at registration.
    """
    __tablename__ = "merchants"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    merchant_name = db.Column(db.String(255), nullable=False)
    contact_person_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Merchant id={self.id} name={self.merchant_name!r}>"

    def to_dict(self) -> dict:
        return {
            "merchant_id": self.id,
            "merchant_name": self.merchant_name,
            "contact_person_name": self.contact_person_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
