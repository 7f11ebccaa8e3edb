# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Credential store and account bootstrap.

SECURITY NOTES:
- PBKDF2-HMAC-SHA512, 100,000 iterations, 64-byte key, 16-byte random salt
- Stored as "salt:hexkey" so no separate salt column is needed
- verify_password() fails closed: malformed hashes return False, never raise
- Minimum 8 characters required
- Session handling lives in session_service.py

MULTI-TENANT: Registration creates the Merchant (tenant root) and its first
user, always an admin, in one transaction.
"""

import hashlib
import hmac
import logging
import secrets

from ..extensions import db
from ..models import Merchant, User
from ..errors import ConflictError, ValidationError
from ..validation import MIN_PASSWORD_LENGTH
from .concurrency import transaction

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000
PBKDF2_DIGEST = "sha512"
PBKDF2_KEY_LENGTH = 64
SALT_BYTES = 16


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def _derive(password: str, salt: str) -> bytes:
    return hashlib.pbkdf2_hmac(
        PBKDF2_DIGEST,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    """
    Hash password with a fresh random salt.

    Returns "salt:hexkey" where salt is 16 random bytes, hex-encoded.
    """
    salt = secrets.token_hex(SALT_BYTES)
    return f"{salt}:{_derive(password, salt).hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """
    Verify password against a "salt:hexkey" hash.

    Returns False for malformed hashes or derivation errors; comparison is
    constant-time.
    """
    try:
        salt, expected_hex = stored_hash.split(":")
        if not salt or not expected_hex:
            return False
        expected = bytes.fromhex(expected_hex)
        actual = _derive(password, salt)
    except (AttributeError, TypeError, ValueError):
        logger.warning("Password verification failed on a malformed hash")
        return False
    return hmac.compare_digest(actual, expected)


def email_taken(email: str, exclude_user_id: int | None = None) -> bool:
    query = db.session.query(User.id).filter(db.func.lower(User.email) == email.lower())
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def register_merchant(
    username: str,
    email: str,
    password: str,
    phone_number: str,
    business_name: str,
) -> User:
    """
    Create a Merchant and its first (admin) user atomically.

    Raises ConflictError on a duplicate email, PasswordValidationError on a
    weak password.
    """
    validate_password_strength(password)
    if email_taken(email):
        raise ConflictError("User with this email already exists")

    password_hash = hash_password(password)

    with transaction():
        merchant = Merchant(
            merchant_name=business_name,
            contact_person_name=username,
            email=email,
            phone_number=phone_number,
        )
        db.session.add(merchant)
        db.session.flush()

        user = User(
            merchant_id=merchant.id,
            username=username,
            email=email,
            phone_number=phone_number,
            password_hash=password_hash,
            role="admin",
        )
        db.session.add(user)

    logger.info("Registered merchant %s with admin user %s", merchant.id, user.id)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Return the user for valid credentials, None otherwise.

    The hash is still computed for unknown emails so response timing does not
    reveal which emails exist.
    """
    user = db.session.query(User).filter(db.func.lower(User.email) == email.lower()).first()
    if not user:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    validate_password_strength(new_password)
    with transaction():
        user.password_hash = hash_password(new_password)


_DUMMY_HASH = f"{'0' * 32}:{'0' * 128}"
