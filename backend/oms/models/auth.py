from __future__ import annotations

from ..extensions import db
from ..time_utils import as_utc_naive, to_utc_z, utcnow


class User(db.Model):
    """
    User accounts for authentication and attribution.

    MULTI-TENANT: Users belong to exactly one merchant (merchant_id).
    Email is globally unique; login is by email alone.

    ROLE: exactly one of admin, manager, employee, pickup. The first user of
    a merchant is always admin.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.Index("ix_users_merchant_role", "merchant_id", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("merchants.id"), nullable=False, index=True)

    username = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(32), nullable=True)

    # PBKDF2-SHA512 "salt:hexkey"
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="employee")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    merchant = db.relationship("Merchant", backref=db.backref("users", lazy=True))

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "user_id": self.id,
            "merchant_id": self.merchant_id,
            "username": self.username,
            "email": self.email,
            "phone_number": self.phone_number,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
        }


class UserSession(db.Model):
    """
    Server-side session behind the opaque session cookie.

    SECURITY NOTES:
    - Only the SHA-256 hash of the cookie value is stored
    - Absolute expiry (expires_at) plus optional sliding idle timeout
    - Revocable on logout, user deletion or password change
    - csrf_secret feeds the per-session CSRF token
    """
    __tablename__ = "user_sessions"
    __table_args__ = (
        db.Index("ix_user_sessions_user_active", "user_id", "revoked_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    sid_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)
    csrf_secret = db.Column(db.String(64), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    last_seen_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    def is_active(self, now) -> bool:
        return self.revoked_at is None and as_utc_naive(self.expires_at) > now

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_seen_at": to_utc_z(self.last_seen_at),
            "expires_at": to_utc_z(self.expires_at),
            "revoked_at": to_utc_z(self.revoked_at),
        }
