# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY FEATURES:
- PBKDF2-SHA512 password hashing, minimum password length on registration
- Server-side sessions behind an opaque HttpOnly cookie
- Phantom tokens for clients that cannot hold cookies
- Generic "Invalid credentials" message for unknown email and bad password
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..cache import get_cache
from ..decorators import require_auth
from ..errors import OmsError, ValidationError, error_response, internal_error_response
from ..log_sanitizer import sanitize_log_input
from ..services import auth_service, csrf_service, session_service, token_service
from ..validation import Invalid, parse_login, parse_register, unwrap

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

REGISTER_FIELDS_MESSAGE = "All fields are required: username, email, password, phone number, and business name"


def _set_session_cookie(response, sid: str):
    response.set_cookie(
        current_app.config["SESSION_COOKIE_NAME"],
        sid,
        max_age=int(current_app.config["SESSION_MAX_AGE_HOURS"]) * 3600,
        httponly=True,
        secure=bool(current_app.config.get("PRODUCTION")),
        samesite="Lax",
        path="/",
    )
    return response


def _open_session(user_id: int) -> str:
    _record, sid = session_service.create_session(
        user_id=user_id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return sid


@auth_bp.post("/register")
def register_route():
    """
    Create a merchant and its first admin user, then sign the user in.
    """
    try:
        result = parse_register(request.get_json(silent=True))
        if isinstance(result, Invalid):
            missing = any(e.endswith("is required") for e in result.errors)
            raise ValidationError(REGISTER_FIELDS_MESSAGE if missing else result.errors[0], list(result.errors))
        data = result.value

        user = auth_service.register_merchant(
            username=data.username,
            email=data.email,
            password=data.password,
            phone_number=data.phone_number,
            business_name=data.business_name,
        )
        sid = _open_session(user.id)
        response = jsonify({
            "message": "User registered successfully",
            "userId": user.id,
            "username": user.username,
            "role": user.role,
        })
        response.status_code = 201
        return _set_session_cookie(response, sid)

    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to register merchant")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email and password.

    Sets the session cookie and also returns a phantom token for
    Authorization: Bearer use.
    """
    try:
        data = unwrap(parse_login(request.get_json(silent=True)), "Email and password are required")
        user = auth_service.authenticate(data.email, data.password)
        if not user:
            current_app.logger.info("Failed login for %s", sanitize_log_input(data.email))
            return jsonify({"message": "Invalid credentials"}), 401

        sid = _open_session(user.id)
        token = token_service.issue_phantom_token(get_cache(), user.id, user.role, user.merchant_id)
        response = jsonify({
            "message": "Logged in successfully",
            "userId": user.id,
            "username": user.username,
            "role": user.role,
            "token": token,
        })
        return _set_session_cookie(response, sid)

    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to login user")


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke the server session and any phantom token presented, and clear
    the cookie. Logging out twice is harmless.
    """
    try:
        cookie_name = current_app.config["SESSION_COOKIE_NAME"]
        session_service.revoke_session(request.cookies.get(cookie_name))

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token_service.revoke_phantom_token(get_cache(), auth_header.split(" ", 1)[1].strip())

        response = jsonify({"message": "Logged out successfully"})
        response.delete_cookie(cookie_name, path="/", samesite="Lax")
        return response

    except Exception as e:
        return internal_error_response(e, "Failed to logout user")


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.identity.to_dict()})


@auth_bp.get("/csrf-token")
@require_auth
def csrf_token_route():
    """CSRF token for the current cookie session (send it as X-CSRF-Token)."""
    if g.session_context is None:
        return jsonify({"message": "CSRF tokens are only issued to cookie sessions"}), 400
    return jsonify({"csrfToken": csrf_service.generate_csrf_token(g.session_context.csrf_secret)})
