# Overview: Request and role decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .cache import get_cache
from .errors import Unauthenticated
from .log_sanitizer import sanitize_log_input
from .services import csrf_service, identity_service, session_service, token_service

UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def _session_cookie() -> str | None:
    return request.cookies.get(current_app.config["SESSION_COOKIE_NAME"])


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def _deny(reason: str, sid: str | None = None):
    current_app.logger.warning(
        "Authentication failed: %s %s %s (session %s)",
        sanitize_log_input(reason),
        request.method,
        sanitize_log_input(request.path),
        (session_service.hash_sid(sid)[:8] if sid else "none"),
    )
    return jsonify({"message": "Authentication required"}), 401


def require_auth(f):
    """
    Require authentication and establish tenant context.

    The session cookie is tried first; without one, an
    "Authorization: Bearer <phantom token>" header is accepted.

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.identity: The resolved Identity (frozen, cached)
    - g.user_id: Integer user id
    - g.merchant_id: The merchant (tenant) of the user - REQUIRED
    - g.role: The user's role
    - g.session_context: SessionContext, or None for bearer requests

    SECURITY: Returns 401 if:
    - No session cookie and no bearer token
    - Session unknown, revoked, expired or idle
    - Phantom token unknown or its JWT invalid
    - The user behind the session no longer exists
    When CSRF_ENFORCED is on, unsafe methods on cookie sessions must carry a
    valid X-CSRF-Token header (403 otherwise).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        cache = get_cache()
        sid = _session_cookie()
        context = None

        if sid:
            context = session_service.load_session(sid)
            if not context:
                return _deny("invalid or expired session", sid)
            user_id = context.user_id
        else:
            user_id = token_service.resolve_phantom_token(cache, _bearer_token())
            if user_id is None:
                return _deny("missing or invalid credentials")

        try:
            identity = identity_service.resolve_identity(
                user_id, cache, ttl=current_app.config.get("IDENTITY_CACHE_TTL")
            )
        except Unauthenticated:
            return _deny("user no longer exists", sid)

        if (
            context is not None
            and current_app.config.get("CSRF_ENFORCED")
            and request.method in UNSAFE_METHODS
            and not csrf_service.verify_csrf_token(context.csrf_secret, request.headers.get("X-CSRF-Token"))
        ):
            current_app.logger.warning(
                "CSRF check failed for user %s on %s %s",
                identity.user_id, request.method, sanitize_log_input(request.path),
            )
            return jsonify({"message": "Invalid CSRF token"}), 403

        g.identity = identity
        g.user_id = identity.user_id
        g.merchant_id = identity.merchant_id
        g.role = identity.role
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles, message: str | None = None):
    """
    Require the authenticated user's role to be one of roles.

    Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            identity = getattr(g, "identity", None)
            if identity is None:
                return jsonify({"message": "Authentication required"}), 401

            if identity.role not in roles:
                current_app.logger.warning(
                    "Access denied for user %s (role %s) on %s %s; requires %s",
                    identity.user_id, identity.role, request.method,
                    sanitize_log_input(request.path), ",".join(roles),
                )
                return jsonify({
                    "message": message or "Access denied",
                    "required_roles": list(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_admin(f=None, *, message: str | None = None):
    """Shorthand for require_role("admin"); usable bare or with a message."""
    if f is None:
        return require_role("admin", message=message or "Admin access required")
    return require_role("admin", message="Admin access required")(f)
