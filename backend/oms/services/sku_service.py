# Overview: Service-layer operations for SKU generation and uniqueness checks.

"""
SKU generation.

Format: SKU-YYYYMMDD-HHMMSS-XXXXX where XXXXX is random uppercase
alphanumeric. Uniqueness is per merchant and is re-checked up to
MAX_ATTEMPTS times; the unique constraint on products is the final guard.
"""

import logging
import time
import secrets
import string

from ..extensions import db
from ..models import Product
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
_ALPHABET = string.ascii_uppercase + string.digits


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def is_sku_unique(merchant_id: int, sku: str, exclude_product_id: int | None = None) -> bool:
    query = db.session.query(Product.id).filter(
        Product.merchant_id == merchant_id,
        db.func.upper(Product.sku) == sku.upper(),
    )
    if exclude_product_id is not None:
        query = query.filter(Product.id != exclude_product_id)
    return query.first() is None


def generate_unique_sku(merchant_id: int, taken: set[str] | None = None) -> str:
    """
    Generate a SKU not yet used by the merchant.

    `taken` holds SKUs reserved earlier in the same unflushed batch.
    """
    taken = taken or set()
    for attempt in range(MAX_ATTEMPTS):
        now = utcnow()
        sku = f"SKU-{now:%Y%m%d}-{now:%H%M%S}-{_random_suffix(5)}"
        if sku not in taken and is_sku_unique(merchant_id, sku):
            return sku
        logger.warning("SKU collision for merchant %s, retrying (attempt %d)", merchant_id, attempt + 1)

    fallback = f"SKU-{int(time.time() * 1000)}-{_random_suffix(8)}"
    logger.warning("Using fallback SKU %s for merchant %s", fallback, merchant_id)
    return fallback
