# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

"""
Inventory management routes.

SECURITY: All routes require authentication.
- Catalog reads and writes are open to every role of the merchant
- Cost price changes are admin only

Stock is never written here except through bulk-update and product
creation; orders decrement it through the order service.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..errors import OmsError, ValidationError, error_response, internal_error_response
from ..services import inventory_service
from ..uploads import read_upload
from ..validation import (
    parse_add_product,
    parse_bulk_update,
    parse_pagination,
    parse_price_update,
    parse_product_update,
    unwrap,
)

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@inventory_bp.get("/")
@require_auth
def list_inventory_route():
    """
    Paged product listing with stock levels.

    Query params: page, limit, category, search, lowStock=true.
    """
    try:
        page, limit = parse_pagination(request.args)
        products, total = inventory_service.list_products(
            g.merchant_id,
            page=page,
            limit=limit,
            category=(request.args.get("category") or "").strip() or None,
            search=(request.args.get("search") or "").strip() or None,
            low_stock=request.args.get("lowStock", "").lower() in ("1", "true", "yes"),
        )
        return jsonify({
            "products": [p.to_dict() for p in products],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": (total + limit - 1) // limit,
            },
        })
    except Exception as e:
        return internal_error_response(e, "Failed to fetch inventory")


@inventory_bp.get("/low-stock")
@require_auth
def low_stock_route():
    try:
        products = inventory_service.list_low_stock(g.merchant_id)
        return jsonify({"products": [p.to_dict() for p in products], "count": len(products)})
    except Exception as e:
        return internal_error_response(e, "Failed to fetch low stock products")


@inventory_bp.post("")
@inventory_bp.post("/")
@inventory_bp.post("/add-product")
@require_auth
def add_product_route():
    """
    Create a product with its stock record.

    Body: {name, category?, sku?, description?, stock, reorderLevel, unitPrice}.
    A SKU is generated when none is given.
    """
    try:
        data = unwrap(parse_add_product(request.get_json(silent=True)))
        product = inventory_service.create_product(g.merchant_id, data)
        return jsonify({
            "message": "Product added successfully",
            "productId": product.id,
            "product": product.to_dict(),
        }), 201
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to add product")


@inventory_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    try:
        patch = unwrap(parse_product_update(request.get_json(silent=True)))
        product = inventory_service.update_product(g.merchant_id, product_id, patch)
        return jsonify({"message": "Product updated successfully", "product": product.to_dict()})
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update product")


@inventory_bp.post("/bulk-update")
@require_auth
def bulk_update_route():
    """Set stock by SKU: {updates: [{sku, stockQuantity}]}. All or nothing."""
    try:
        updates = unwrap(parse_bulk_update(request.get_json(silent=True)))
        updated, not_found = inventory_service.bulk_update_stock(g.merchant_id, updates)
        return jsonify({
            "message": f"{len(updated)} products updated successfully",
            "updated": len(updated),
            "notFound": not_found,
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to bulk update inventory")


@inventory_bp.post("/upload-csv")
@require_auth
def upload_inventory_route():
    """
    Product upload (CSV, JSON or Excel).

    Columns: product_name, category, stock_quantity, reorder_level,
    unit_price, sku (Title Case accepted).
    """
    try:
        file = request.files.get("file")
        if not file:
            raise ValidationError("No file uploaded")
        result = inventory_service.import_products(g.merchant_id, read_upload(file))
        return jsonify(result)
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to process inventory upload")


@inventory_bp.patch("/<int:product_id>/price")
@require_auth
@require_admin(message="Only admins can change cost prices")
def update_price_route(product_id: int):
    try:
        price = unwrap(parse_price_update(request.get_json(silent=True)))
        record = inventory_service.update_cost_price(g.merchant_id, product_id, price)
        return jsonify({
            "message": "Cost price updated successfully",
            "productId": product_id,
            "unitPrice": float(record.cost_price),
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update cost price")
