# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Server-side session store behind the opaque session cookie.

The cookie carries nothing but a random id. Everything it grants lives in
user_sessions and can be revoked immediately.

SECURITY FEATURES:
- Cryptographically secure random ids (32 bytes)
- Ids hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_MAX_AGE_HOURS, 24h by default)
- Optional sliding idle timeout (SESSION_IDLE_TIMEOUT_MINUTES)
- Revocable on logout, password change or user deletion
- The only identity the session holds is the integer user_id
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import UserSession
from ..time_utils import as_utc_naive, utcnow

logger = logging.getLogger(__name__)

# Sessions revoked or expired longer ago than this are deleted by cleanup
CLEANUP_RETENTION = timedelta(days=30)


@dataclass(frozen=True)
class SessionContext:
    """What a valid session resolves to. user_id is always an int."""
    session_id: int
    user_id: int
    csrf_secret: str


def generate_sid() -> str:
    """64-character hex string (32 bytes of entropy), sent to the client only."""
    return secrets.token_hex(32)


def hash_sid(sid: str) -> str:
    return hashlib.sha256(sid.encode("utf-8")).hexdigest()


def _max_age() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_MAX_AGE_HOURS", 24))


def _idle_timeout() -> timedelta | None:
    minutes = current_app.config.get("SESSION_IDLE_TIMEOUT_MINUTES", 0)
    return timedelta(minutes=minutes) if minutes else None


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[UserSession, str]:
    """
    Open a session for user_id.

    Returns (session_record, plaintext_sid). Only the hash is persisted.
    """
    sid = generate_sid()
    now = utcnow()
    record = UserSession(
        user_id=int(user_id),
        sid_hash=hash_sid(sid),
        csrf_secret=secrets.token_hex(32),
        created_at=now,
        last_seen_at=now,
        expires_at=now + _max_age(),
        user_agent=(user_agent or "")[:512] or None,
        ip_address=ip_address,
    )
    db.session.add(record)
    db.session.commit()
    return record, sid


def load_session(sid: str | None) -> SessionContext | None:
    """
    Resolve a cookie value to its session context.

    Returns None if the id is unknown, revoked, past its absolute expiry, or
    idle past the sliding timeout (when enabled). A live session under the
    sliding policy gets its last_seen_at refreshed.
    """
    if not sid:
        return None

    now = utcnow()
    record = db.session.query(UserSession).filter_by(sid_hash=hash_sid(sid)).first()
    if not record or not record.is_active(now):
        return None

    idle = _idle_timeout()
    if idle is not None:
        if now - as_utc_naive(record.last_seen_at) > idle:
            record.revoked_at = now
            db.session.commit()
            logger.info("Session %s revoked after idle timeout", record.id)
            return None
        record.last_seen_at = now
        db.session.commit()

    return SessionContext(session_id=record.id, user_id=int(record.user_id), csrf_secret=record.csrf_secret)


def revoke_session(sid: str | None) -> bool:
    """Returns True if an active session was revoked."""
    if not sid:
        return False
    record = db.session.query(UserSession).filter_by(sid_hash=hash_sid(sid), revoked_at=None).first()
    if not record:
        return False
    record.revoked_at = utcnow()
    db.session.commit()
    return True


def revoke_user_sessions(user_id: int, keep_session_id: int | None = None) -> int:
    """
    Revoke every active session of a user, except keep_session_id if given.
    Does not commit: callers run it inside their own transaction (password
    change, user deletion).
    """
    now = utcnow()
    query = db.session.query(UserSession).filter_by(user_id=user_id, revoked_at=None)
    if keep_session_id is not None:
        query = query.filter(UserSession.id != keep_session_id)
    sessions = query.all()
    for record in sessions:
        record.revoked_at = now
    return len(sessions)


def cleanup_expired_sessions() -> int:
    """Delete sessions that expired or were revoked more than 30 days ago."""
    cutoff = utcnow() - CLEANUP_RETENTION
    count = db.session.query(UserSession).filter(
        db.or_(
            UserSession.expires_at < cutoff,
            UserSession.revoked_at < cutoff,
        )
    ).delete(synchronize_session=False)
    db.session.commit()
    return count
