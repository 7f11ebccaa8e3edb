# Overview: Service-layer operations for identity resolution; read-through cached user lookups.

"""
Identity Resolver.

Maps an authenticated user_id to {merchant_id, username, email, role}.

CACHING: read-through, key "user_{id}", TTL IDENTITY_CACHE_TTL (300s).
A cached identity may be up to one TTL stale relative to role or merchant
changes; the user-management endpoints call forget_identity() on the
entries they change so the acting admin's own edits take effect at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..cache import TTLCache
from ..errors import Unauthenticated
from ..extensions import db
from ..models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: int
    merchant_id: int
    username: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "merchantId": self.merchant_id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
        }


def cache_key(user_id: int) -> str:
    return f"user_{int(user_id)}"


def resolve_identity(user_id: int | None, cache: TTLCache, ttl: float | None = None) -> Identity:
    """
    Resolve user_id to an Identity.

    Raises Unauthenticated when user_id is missing or the user no longer
    exists (a session that outlived its user).
    """
    if user_id is None:
        raise Unauthenticated()

    key = cache_key(user_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    user = db.session.get(User, int(user_id))
    if user is None:
        logger.warning("Session references missing user %s", user_id)
        raise Unauthenticated()

    identity = Identity(
        user_id=user.id,
        merchant_id=user.merchant_id,
        username=user.username,
        email=user.email,
        role=user.role,
    )
    cache.set(key, identity, ttl=ttl)
    logger.debug("Resolved identity for user %s (role=%s)", user.id, user.role)
    return identity


def forget_identity(user_id: int, cache: TTLCache) -> None:
    cache.delete(cache_key(user_id))
