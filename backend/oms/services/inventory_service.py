# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

"""
Inventory Ledger.

Two mutation surfaces share the inventory table:
- Order reservations: reserve_stock() decrements through one conditional
  UPDATE (quantity_available >= n in the WHERE clause). Zero rows affected
  means insufficient stock, so two concurrent orders can never both take
  the last units.
- Direct catalog maintenance: add product, bulk set-by-SKU (all or nothing),
  CSV import (per-row savepoints, continue on error), cost price updates.

MULTI-TENANT: every query filters on merchant_id; another merchant's
product id resolves to NotFoundError.

Low stock is always computed (quantity_available <= reorder_level).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.exc import DataError, IntegrityError

from ..errors import ConflictError, NotFoundError, OmsError, ValidationError
from ..extensions import db
from ..models import InventoryRecord, Product
from ..time_utils import utcnow
from ..validation import Invalid, ProductInput, ProductUpdate, StockUpdate, parse_inventory_row
from . import sku_service
from .concurrency import savepoint, transaction

logger = logging.getLogger(__name__)


def get_product(merchant_id: int, product_id: int) -> Product:
    product = db.session.query(Product).filter_by(id=product_id, merchant_id=merchant_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def find_stock_by_name(merchant_id: int, product_name: str) -> tuple[Product, InventoryRecord] | None:
    row = (
        db.session.query(Product, InventoryRecord)
        .join(InventoryRecord, InventoryRecord.product_id == Product.id)
        .filter(Product.merchant_id == merchant_id, Product.product_name == product_name)
        .order_by(Product.id.asc())
        .first()
    )
    return (row[0], row[1]) if row else None


def find_stock_by_id(merchant_id: int, product_id: int) -> tuple[Product, InventoryRecord] | None:
    row = (
        db.session.query(Product, InventoryRecord)
        .join(InventoryRecord, InventoryRecord.product_id == Product.id)
        .filter(Product.merchant_id == merchant_id, Product.id == product_id)
        .first()
    )
    return (row[0], row[1]) if row else None


def reserve_stock(inventory_id: int, quantity: int) -> bool:
    """
    Atomically take `quantity` units. Returns False (and changes nothing)
    when fewer than `quantity` are available.
    """
    result = db.session.execute(
        update(InventoryRecord)
        .where(
            InventoryRecord.id == inventory_id,
            InventoryRecord.quantity_available >= quantity,
        )
        .values(
            quantity_available=InventoryRecord.quantity_available - quantity,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1


def available_quantity(inventory_id: int) -> int:
    value = db.session.query(InventoryRecord.quantity_available).filter_by(id=inventory_id).scalar()
    return int(value or 0)


def list_products(
    merchant_id: int,
    *,
    page: int,
    limit: int,
    category: str | None = None,
    search: str | None = None,
    low_stock: bool = False,
) -> tuple[list[Product], int]:
    query = (
        db.session.query(Product)
        .outerjoin(InventoryRecord, InventoryRecord.product_id == Product.id)
        .filter(Product.merchant_id == merchant_id)
    )
    if category and category != "all":
        query = query.filter(Product.category == category)
    if search:
        pattern = f"%{search}%"
        query = query.filter(db.or_(Product.product_name.ilike(pattern), Product.sku.ilike(pattern)))
    if low_stock:
        query = query.filter(InventoryRecord.quantity_available <= InventoryRecord.reorder_level)

    total = query.count()
    products = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return products, total


def list_low_stock(merchant_id: int) -> list[Product]:
    return (
        db.session.query(Product)
        .join(InventoryRecord, InventoryRecord.product_id == Product.id)
        .filter(
            Product.merchant_id == merchant_id,
            InventoryRecord.quantity_available <= InventoryRecord.reorder_level,
        )
        .order_by(InventoryRecord.quantity_available.asc(), Product.id.asc())
        .all()
    )


def count_low_stock(merchant_id: int) -> int:
    return (
        db.session.query(db.func.count(InventoryRecord.id))
        .filter(
            InventoryRecord.merchant_id == merchant_id,
            InventoryRecord.quantity_available <= InventoryRecord.reorder_level,
        )
        .scalar()
        or 0
    )


def _insert_product(merchant_id: int, data: ProductInput, taken: set[str] | None = None) -> Product:
    """Insert Product + InventoryRecord without committing."""
    if data.sku:
        if not sku_service.is_sku_unique(merchant_id, data.sku) or (taken and data.sku in taken):
            raise ConflictError(f'SKU "{data.sku}" already exists')
        sku = data.sku
    else:
        sku = sku_service.generate_unique_sku(merchant_id, taken)
    if taken is not None:
        taken.add(sku)

    product = Product(
        merchant_id=merchant_id,
        product_name=data.name,
        sku=sku,
        description=data.description,
        category=data.category,
    )
    db.session.add(product)
    db.session.flush()

    record = InventoryRecord(
        merchant_id=merchant_id,
        product_id=product.id,
        sku=sku,
        quantity_available=data.stock,
        reorder_level=data.reorder_level,
        cost_price=data.unit_price,
    )
    db.session.add(record)
    db.session.flush()
    return product


def create_product(merchant_id: int, data: ProductInput) -> Product:
    """Create a product and its inventory record in one transaction."""
    try:
        with transaction():
            product = _insert_product(merchant_id, data)
    except IntegrityError:
        raise ConflictError("A product with this SKU already exists")
    logger.info("Product %s (%s) added for merchant %s", product.id, product.sku, merchant_id)
    return product


def update_product(merchant_id: int, product_id: int, patch: ProductUpdate) -> Product:
    try:
        with transaction():
            product = get_product(merchant_id, product_id)
            if "name" in patch.fields:
                product.product_name = patch.name
            if "category" in patch.fields:
                product.category = patch.category
            if "description" in patch.fields:
                product.description = patch.description
            if "sku" in patch.fields and patch.sku and patch.sku != product.sku:
                if not sku_service.is_sku_unique(merchant_id, patch.sku, exclude_product_id=product.id):
                    raise ConflictError(f'SKU "{patch.sku}" already exists')
                product.sku = patch.sku
                if product.inventory is not None:
                    product.inventory.sku = patch.sku
    except IntegrityError:
        raise ConflictError("A product with this SKU already exists")
    return product


def bulk_update_stock(merchant_id: int, updates: tuple[StockUpdate, ...]) -> tuple[list[InventoryRecord], list[str]]:
    """
    Set quantity_available by SKU for many products in one transaction.

    Unknown SKUs are skipped and reported; any database error rolls back
    every row.
    """
    updated: list[InventoryRecord] = []
    not_found: list[str] = []
    with transaction():
        for item in updates:
            record = (
                db.session.query(InventoryRecord)
                .filter(
                    InventoryRecord.merchant_id == merchant_id,
                    db.func.upper(InventoryRecord.sku) == item.sku,
                )
                .first()
            )
            if record is None:
                not_found.append(item.sku)
                continue
            record.quantity_available = item.quantity
            record.updated_at = utcnow()
            updated.append(record)
        db.session.flush()
    logger.info("Bulk stock update for merchant %s: %d updated, %d unknown", merchant_id, len(updated), len(not_found))
    return updated, not_found


def import_products(merchant_id: int, rows: list[dict]) -> dict:
    """
    Create products from upload rows, continuing past failing rows.

    Each row runs in its own savepoint: a failing row leaves no partial
    product behind, earlier rows are kept. Raises ValidationError when no
    row is usable.
    """
    errors: list[str] = []
    parsed: list[ProductInput] = []
    for row in rows:
        result = parse_inventory_row(row)
        if isinstance(result, Invalid):
            errors.extend(result.errors)
        else:
            parsed.append(result.value)

    if not parsed:
        raise ValidationError("No valid products found in CSV", errors or ["File contains no rows"])

    created: list[Product] = []
    taken: set[str] = set()
    with transaction():
        for data in parsed:
            try:
                with savepoint():
                    created.append(_insert_product(merchant_id, data, taken))
            except (OmsError, IntegrityError, DataError) as exc:
                message = exc.message if isinstance(exc, OmsError) else "duplicate or invalid values"
                errors.append(f"Error creating product {data.name}: {message}")
                logger.warning("Inventory import row failed for %s: %s", data.name, message)

    logger.info("Inventory import for merchant %s: %d created, %d errors", merchant_id, len(created), len(errors))
    return {
        "message": f"Successfully processed {len(created)} products",
        "created": len(created),
        "errors": len(errors),
        "errorDetails": errors,
    }


def update_cost_price(merchant_id: int, product_id: int, unit_price: Decimal) -> InventoryRecord:
    """
    Set the cost price used for new orders. Existing order items keep their
    snapshot price.
    """
    with transaction():
        record = (
            db.session.query(InventoryRecord)
            .filter_by(product_id=product_id, merchant_id=merchant_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Product not found")
        record.cost_price = unit_price
        record.updated_at = utcnow()
    return record
