# Overview: Service-layer operations for user management and profiles; encapsulates business logic and database work.

"""
User management within one merchant.

SECURITY:
- Only admins reach these functions for other users (routes apply
  require_admin); profile functions only ever touch the caller.
- An admin cannot delete itself, and admin accounts cannot be deleted.
- Role changes and deletions drop the affected user's cached identity and
  deletions revoke every session of the deleted user.

MULTI-TENANT: a user id from another merchant resolves to NotFoundError.
"""

import logging

from sqlalchemy.exc import IntegrityError

from ..cache import TTLCache
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Merchant, Order, User
from ..validation import CreateUserRequest, ProfileUpdate
from . import auth_service, identity_service, session_service
from .concurrency import transaction

logger = logging.getLogger(__name__)


def list_users(merchant_id: int) -> list[User]:
    return (
        db.session.query(User)
        .filter_by(merchant_id=merchant_id)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def get_user(merchant_id: int, user_id: int) -> User:
    user = db.session.query(User).filter_by(id=user_id, merchant_id=merchant_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(merchant_id: int, data: CreateUserRequest) -> User:
    auth_service.validate_password_strength(data.password)
    if auth_service.email_taken(data.email):
        raise ConflictError("User with this email already exists")

    try:
        with transaction():
            user = User(
                merchant_id=merchant_id,
                username=data.username,
                email=data.email,
                phone_number=data.phone_number,
                password_hash=auth_service.hash_password(data.password),
                role=data.role,
            )
            db.session.add(user)
    except IntegrityError:
        raise ConflictError("User with this email already exists")

    logger.info("User %s created in merchant %s with role %s", user.id, merchant_id, user.role)
    return user


def update_role(merchant_id: int, user_id: int, role: str, cache: TTLCache) -> User:
    with transaction():
        user = get_user(merchant_id, user_id)
        user.role = role
    identity_service.forget_identity(user.id, cache)
    logger.info("User %s role set to %s", user.id, role)
    return user


def delete_user(merchant_id: int, actor_id: int, user_id: int, cache: TTLCache) -> None:
    if user_id == actor_id:
        raise ValidationError("Cannot delete your own account")

    with transaction():
        user = db.session.query(User).filter(
            User.id == user_id,
            User.merchant_id == merchant_id,
            User.role != "admin",
        ).first()
        if not user:
            raise NotFoundError("User not found or cannot delete admin")

        # Assigned orders go back to the unassigned pool
        db.session.query(Order).filter_by(user_id=user.id, merchant_id=merchant_id).update(
            {Order.user_id: None}, synchronize_session=False
        )
        session_service.revoke_user_sessions(user.id)
        db.session.delete(user)

    identity_service.forget_identity(user_id, cache)
    logger.info("User %s deleted by %s", user_id, actor_id)


def update_profile(user_id: int, data: ProfileUpdate, cache: TTLCache) -> User:
    """
    Update the caller's own name, email and phone. For an admin the
    merchant's contact details follow the profile.
    """
    if data.email and auth_service.email_taken(data.email, exclude_user_id=user_id):
        raise ConflictError("User with this email already exists")

    try:
        with transaction():
            user = db.session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            if data.username:
                user.username = data.username
            if data.email:
                user.email = data.email
            if data.phone_number is not None:
                user.phone_number = data.phone_number

            if user.role == "admin":
                merchant = db.session.get(Merchant, user.merchant_id)
                merchant.contact_person_name = user.username
                merchant.email = user.email
                merchant.phone_number = user.phone_number
    except IntegrityError:
        raise ConflictError("User with this email already exists")

    identity_service.forget_identity(user_id, cache)
    return user


def change_password(user_id: int, current_password: str, new_password: str, keep_session_id: int | None = None) -> None:
    """Change the caller's password and sign out every other session."""
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    auth_service.change_password(user, current_password, new_password)
    with transaction():
        revoked = session_service.revoke_user_sessions(user_id, keep_session_id=keep_session_id)
    logger.info("Password changed for user %s; %d other sessions revoked", user_id, revoked)
