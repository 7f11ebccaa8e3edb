# Overview: Service-layer operations for CSRF tokens bound to a server session.

import hashlib
import hmac

from flask import current_app


def generate_csrf_token(session_secret: str) -> str:
    """HMAC-SHA256 of the per-session secret under CSRF_SECRET."""
    key = current_app.config["CSRF_SECRET"].encode("utf-8")
    return hmac.new(key, session_secret.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_csrf_token(session_secret: str, token: str | None) -> bool:
    if not token:
        return False
    return hmac.compare_digest(generate_csrf_token(session_secret), token)
