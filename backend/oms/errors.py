# Overview: Error taxonomy shared by services and routes, with JSON rendering.

"""
Every business failure raised by a service is one of these classes. Routes
catch OmsError and turn it into a JSON response with error_response(); any
other exception is an InternalError from the client's point of view.

SECURITY: Cross-tenant lookups raise NotFoundError, never Unauthorized, so a
caller cannot confirm that another merchant's row exists.
"""

from __future__ import annotations

from flask import current_app, jsonify


class OmsError(Exception):
    """Base class; status_code maps the error to an HTTP status."""
    status_code = 500

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"message": self.message}
        body.update(self.extra)
        return body


class Unauthenticated(OmsError):
    status_code = 401

    def __init__(self, message: str = "Authentication required", **extra):
        super().__init__(message, **extra)


class Unauthorized(OmsError):
    status_code = 403

    def __init__(self, message: str = "Access denied", **extra):
        super().__init__(message, **extra)


class NotFoundError(OmsError):
    status_code = 404


class ValidationError(OmsError, ValueError):
    """400-level input problem. Carries the list of violations."""
    status_code = 400

    def __init__(self, message: str, errors: list[str] | None = None, **extra):
        super().__init__(message, **extra)
        self.errors = list(errors) if errors else [message]

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ConflictError(OmsError, ValueError):
    """409-level business rule conflict (e.g., duplicate email or SKU)."""
    status_code = 409


class InternalError(OmsError):
    status_code = 500


def error_response(exc: OmsError):
    return jsonify(exc.to_dict()), exc.status_code


def internal_error_response(exc: Exception, log_message: str):
    """
    Log an unexpected exception and answer 500.

    The exception text is only exposed outside production.
    """
    current_app.logger.exception(log_message)
    body = {"message": "Internal server error"}
    if not current_app.config.get("PRODUCTION"):
        body["error"] = str(exc)
    return jsonify(body), 500
