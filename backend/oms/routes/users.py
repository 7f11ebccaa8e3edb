# Overview: Flask API routes for user management and profiles; parses input and returns JSON responses.

"""
User management and profile routes.

SECURITY:
- /api/users/* is admin only and scoped to the admin's merchant
- /api/profile/* only ever reads or writes the caller
"""

from flask import Blueprint, g, jsonify, request

from ..cache import get_cache
from ..decorators import require_admin, require_auth
from ..errors import OmsError, error_response, internal_error_response
from ..services import user_service
from ..validation import (
    parse_create_user,
    parse_password_change,
    parse_profile_update,
    parse_role_update,
    unwrap,
)

users_bp = Blueprint("users", __name__, url_prefix="/api")


@users_bp.get("/users")
@require_auth
@require_admin
def list_users_route():
    try:
        users = user_service.list_users(g.merchant_id)
        return jsonify({"users": [u.to_dict() for u in users]})
    except Exception as e:
        return internal_error_response(e, "Failed to list users")


@users_bp.post("/users")
@require_auth
@require_admin
def create_user_route():
    """Invite a user into the caller's merchant: {username, email, password, role, phoneNumber?}."""
    try:
        data = unwrap(parse_create_user(request.get_json(silent=True)))
        user = user_service.create_user(g.merchant_id, data)
        return jsonify({"message": "User created successfully", "user": user.to_dict()}), 201
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to create user")


@users_bp.put("/users/<int:user_id>/role")
@require_auth
@require_admin
def update_role_route(user_id: int):
    try:
        role = unwrap(parse_role_update(request.get_json(silent=True)))
        user = user_service.update_role(g.merchant_id, user_id, role, get_cache())
        return jsonify({"message": "Role updated successfully", "user": user.to_dict()})
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update role")


@users_bp.delete("/users/<int:user_id>")
@require_auth
@require_admin
def delete_user_route(user_id: int):
    try:
        user_service.delete_user(g.merchant_id, g.user_id, user_id, get_cache())
        return jsonify({"message": "User deleted successfully"})
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to delete user")


@users_bp.get("/profile")
@require_auth
def get_profile_route():
    try:
        user = user_service.get_user(g.merchant_id, g.user_id)
        return jsonify({
            "username": user.username,
            "email": user.email,
            "phone": user.phone_number,
            "role": user.role,
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to fetch profile")


@users_bp.put("/profile")
@require_auth
def update_profile_route():
    try:
        data = unwrap(parse_profile_update(request.get_json(silent=True)))
        user = user_service.update_profile(g.user_id, data, get_cache())
        return jsonify({
            "message": "Profile updated successfully",
            "username": user.username,
            "email": user.email,
            "phone": user.phone_number,
        })
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to update profile")


@users_bp.put("/profile/password")
@require_auth
def change_password_route():
    """Other sessions of the caller are signed out; the current one stays."""
    try:
        data = unwrap(parse_password_change(request.get_json(silent=True)))
        keep = g.session_context.session_id if g.session_context else None
        user_service.change_password(g.user_id, data.current_password, data.new_password, keep_session_id=keep)
        return jsonify({"message": "Password changed successfully"})
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to change password")
