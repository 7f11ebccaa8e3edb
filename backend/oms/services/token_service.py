# Overview: Service-layer operations for phantom tokens; encapsulates signing and resolution.

"""
Phantom token pattern.

The client receives an opaque random token. The server keeps the mapping
token -> signed JWT in the injected cache for the token lifetime (15 min by
default) and validates the JWT (signature, expiry, issuer, audience) every
time the opaque token is presented. Signed claims never leave the server.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta

import jwt
from flask import current_app

from ..cache import TTLCache
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
KEY_PREFIX = "phantom_"


def _config(name: str):
    return current_app.config[name]


def sign_claims(user_id: int, role: str, merchant_id: int, ttl_seconds: int) -> str:
    now = utcnow()
    payload = {
        "sub": str(user_id),
        "role": role,
        "merchant_id": merchant_id,
        "iss": _config("JWT_ISSUER"),
        "aud": _config("JWT_AUDIENCE"),
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, _config("JWT_SECRET"), algorithm=ALGORITHM)


def issue_phantom_token(cache: TTLCache, user_id: int, role: str, merchant_id: int) -> str:
    ttl = int(_config("PHANTOM_TOKEN_TTL"))
    token = secrets.token_urlsafe(32)
    cache.set(KEY_PREFIX + token, sign_claims(user_id, role, merchant_id, ttl), ttl=ttl)
    return token


def resolve_phantom_token(cache: TTLCache, token: str | None) -> int | None:
    """
    Return the user_id behind a phantom token, or None.

    A token whose JWT no longer validates is dropped from the cache.
    """
    if not token:
        return None
    signed = cache.get(KEY_PREFIX + token)
    if signed is None:
        return None
    try:
        claims = jwt.decode(
            signed,
            _config("JWT_SECRET"),
            algorithms=[ALGORITHM],
            issuer=_config("JWT_ISSUER"),
            audience=_config("JWT_AUDIENCE"),
        )
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected phantom token: %s", exc)
        cache.delete(KEY_PREFIX + token)
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None


def revoke_phantom_token(cache: TTLCache, token: str | None) -> bool:
    if not token:
        return False
    return cache.delete(KEY_PREFIX + token)
