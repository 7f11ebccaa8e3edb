"""
Pytest fixtures for OMS backend tests.

Provides test database setup, two tenants (merchants) with users, stocked
products and logged-in test clients.
"""

from decimal import Decimal

import pytest

from oms import create_app
from oms.config import TestConfig
from oms.extensions import db
from oms.models import InventoryRecord, Product, User
from oms.services.auth_service import hash_password, register_merchant

PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def cache(app):
    return app.extensions["oms_cache"]


@pytest.fixture(scope='function')
def db_session(app, cache):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        cache.clear()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def admin_a(db_session):
    """Admin of Merchant A (first tenant), created through registration."""
    return register_merchant(
        username="alice",
        email="alice@acme.test",
        password=PASSWORD,
        phone_number="555-0100",
        business_name="Acme Corp",
    )


@pytest.fixture(scope='function')
def admin_b(db_session):
    """Admin of Merchant B (second tenant)."""
    return register_merchant(
        username="bob",
        email="bob@beta.test",
        password=PASSWORD,
        phone_number="555-0200",
        business_name="Beta Inc",
    )


def make_user(merchant_id: int, username: str, role: str = "employee") -> User:
    user = User(
        merchant_id=merchant_id,
        username=username,
        email=f"{username}@example.test",
        password_hash=hash_password(PASSWORD),
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    return user


def make_product(
    merchant_id: int,
    name: str,
    *,
    stock: int = 10,
    cost_price=Decimal("10.00"),
    reorder_level: int = 2,
    sku: str | None = None,
) -> Product:
    product = Product(
        merchant_id=merchant_id,
        product_name=name,
        sku=sku or f"SKU-{name.upper().replace(' ', '-')}",
        category="General",
    )
    db.session.add(product)
    db.session.flush()
    db.session.add(InventoryRecord(
        merchant_id=merchant_id,
        product_id=product.id,
        sku=product.sku,
        quantity_available=stock,
        reorder_level=reorder_level,
        cost_price=cost_price,
    ))
    db.session.commit()
    return product


@pytest.fixture(scope='function')
def employee_a(admin_a):
    return make_user(admin_a.merchant_id, "erin", role="employee")


@pytest.fixture(scope='function')
def employee_a2(admin_a):
    return make_user(admin_a.merchant_id, "evan", role="employee")


@pytest.fixture(scope='function')
def widget_a(admin_a):
    """Product in Merchant A: 10 in stock at cost 10.00."""
    return make_product(admin_a.merchant_id, "Widget", stock=10, cost_price=Decimal("10.00"))


@pytest.fixture(scope='function')
def widget_b(admin_b):
    """Same product name in Merchant B."""
    return make_product(admin_b.merchant_id, "Widget", stock=5, cost_price=Decimal("20.00"))


def login(app, email: str, password: str = PASSWORD):
    """Return a test client holding a session cookie for the user."""
    client = app.test_client()
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_client(app, admin_a):
    return login(app, admin_a.email)


@pytest.fixture(scope='function')
def employee_client(app, employee_a):
    return login(app, employee_a.email)


@pytest.fixture(scope='function')
def admin_b_client(app, admin_b):
    return login(app, admin_b.email)


def manual_order(client, product_name="Widget", quantity=1, phone="555-1000", **extra):
    payload = {
        'customerName': 'Carol',
        'customerPhone': phone,
        'productName': product_name,
        'quantity': quantity,
    }
    payload.update(extra)
    return client.post('/api/orders/add-manual', json=payload)
