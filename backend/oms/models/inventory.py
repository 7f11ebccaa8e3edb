from __future__ import annotations

from ..extensions import db
from ..time_utils import money, to_utc_z, utcnow


class Product(db.Model):
    """
    Product master data.

    MULTI-TENANT: Products are scoped to merchants via merchant_id.
    SKUs are unique within a merchant: UniqueConstraint("merchant_id", "sku").
    Orders resolve products by (merchant_id, product_name).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("merchant_id", "sku", name="uq_products_merchant_sku"),
        db.Index("ix_products_merchant_name", "merchant_id", "product_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("merchants.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    inventory = db.relationship("InventoryRecord", back_populates="product", uselist=False)

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.product_name!r} merchant_id={self.merchant_id}>"

    def to_dict(self) -> dict:
        data = {
            "product_id": self.id,
            "merchant_id": self.merchant_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "description": self.description,
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if self.inventory is not None:
            data.update(self.inventory.stock_dict())
        return data


class InventoryRecord(db.Model):
    """
    Stock bookkeeping, 1:1 with Product.

    INVARIANT: quantity_available >= 0. Order reservations decrement through a
    conditional UPDATE so the row never goes negative.
    Low stock is derived (quantity_available <= reorder_level), never stored.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.UniqueConstraint("product_id", name="uq_inventory_product"),
        db.CheckConstraint("quantity_available >= 0", name="ck_inventory_quantity_non_negative"),
        db.Index("ix_inventory_merchant_sku", "merchant_id", "sku"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("merchants.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    sku = db.Column(db.String(100), nullable=False)

    quantity_available = db.Column(db.Integer, nullable=False, default=0)
    reorder_level = db.Column(db.Integer, nullable=False, default=0)
    cost_price = db.Column(db.Numeric(12, 2), nullable=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    product = db.relationship("Product", back_populates="inventory")

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_available <= self.reorder_level

    def stock_dict(self) -> dict:
        return {
            "inventory_id": self.id,
            "quantity_available": self.quantity_available,
            "reorder_level": self.reorder_level,
            "unit_price": money(self.cost_price),
            "is_low_stock": self.is_low_stock,
        }
