"""
Identity resolver tests: read-through caching and bounded staleness.
"""

import pytest

from oms.cache import TTLCache
from oms.errors import Unauthenticated
from oms.extensions import db
from oms.models import User
from oms.services import identity_service


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestResolveIdentity:

    def test_resolves_and_caches(self, admin_a):
        cache = TTLCache()
        identity = identity_service.resolve_identity(admin_a.id, cache, ttl=300)
        assert identity.user_id == admin_a.id
        assert identity.merchant_id == admin_a.merchant_id
        assert identity.role == "admin"
        assert identity.is_admin
        assert cache.get(f"user_{admin_a.id}") is identity

    def test_cached_value_may_be_stale_within_ttl(self, employee_a):
        clock = FakeClock()
        cache = TTLCache(clock=clock)
        identity_service.resolve_identity(employee_a.id, cache, ttl=300)

        employee_a.role = "admin"
        db.session.commit()

        clock.now = 299
        assert identity_service.resolve_identity(employee_a.id, cache, ttl=300).role == "employee"
        clock.now = 300
        assert identity_service.resolve_identity(employee_a.id, cache, ttl=300).role == "admin"

    def test_forget_identity_drops_entry(self, employee_a):
        cache = TTLCache()
        identity_service.resolve_identity(employee_a.id, cache, ttl=300)
        employee_a.role = "manager"
        db.session.commit()

        identity_service.forget_identity(employee_a.id, cache)
        assert identity_service.resolve_identity(employee_a.id, cache, ttl=300).role == "manager"

    def test_missing_user(self, db_session):
        with pytest.raises(Unauthenticated):
            identity_service.resolve_identity(424242, TTLCache())

    def test_none_user_id(self, db_session):
        with pytest.raises(Unauthenticated):
            identity_service.resolve_identity(None, TTLCache())

    def test_identity_is_immutable(self, admin_a):
        identity = identity_service.resolve_identity(admin_a.id, TTLCache())
        with pytest.raises(AttributeError):
            identity.role = "employee"

    def test_deleted_user_not_resolved_after_forget(self, employee_a):
        cache = TTLCache()
        user_id = employee_a.id
        identity_service.resolve_identity(user_id, cache)
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()

        identity_service.forget_identity(user_id, cache)
        with pytest.raises(Unauthenticated):
            identity_service.resolve_identity(user_id, cache)
