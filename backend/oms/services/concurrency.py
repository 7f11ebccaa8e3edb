# Overview: Transaction, savepoint and row-locking helpers shared by every write path.

"""
Every multi-step write (order create, status update, assignment, payment,
bulk import) runs inside transaction(): all statements go through the one
scoped session, and therefore the one pooled connection, held for the
request. The block commits once at the end; any exception (business error,
database error, statement timeout) rolls back and re-raises, so the
connection always returns to the pool clean.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction():
    """Commit on success, roll back on any exception and re-raise it."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


@contextmanager
def savepoint():
    """
    Nested SAVEPOINT inside the current transaction.

    On exception only the work since the savepoint is undone; the outer
    transaction stays usable. Used for per-row isolation in bulk imports.
    """
    with db.session.begin_nested():
        yield


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


# PostgreSQL query_canceled, raised when statement_timeout fires
QUERY_CANCELED = "57014"


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, OperationalError):
        return getattr(exc.orig, "pgcode", None) != QUERY_CANCELED
    return True


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, lock timeouts) and StaleDataError.
    A cancelled statement (statement_timeout) is re-raised at once.
    func must be safe to re-run from scratch: it owns its transaction.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1 or not _is_retryable(exc):
                raise
            logger.warning("Retrying after concurrency failure (attempt %d/%d)", attempt + 1, attempts)
            time.sleep(backoff_base * (2 ** attempt))
