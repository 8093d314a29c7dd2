"""
Pytest fixtures for Courtside backend tests.

Provides the in-memory database, staff accounts with session tokens,
catalog/venue factories and the test client.
"""

import pytest

from courtside import create_app
from courtside.extensions import db
from courtside.models import User
from courtside.models.auth import ROLE_ADMIN, ROLE_KASIR, ROLE_OWNER
from courtside.models.catalog import PRODUCT_TYPE_RENT, PRODUCT_TYPE_SELL
from courtside.services import catalog_service, inventory_service, session_service, venue_service
from courtside.services.auth_service import hash_password

PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'NOTIFICATION_HEARTBEAT_SECONDS': 1,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(PASSWORD)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _make_user(db_session, password_hash, name, email, role):
    user = User(name=name, email=email, password_hash=password_hash, role=role, is_active=True)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def owner(db_session, password_hash):
    return _make_user(db_session, password_hash, "Owner", "owner@courtside.test", ROLE_OWNER)


@pytest.fixture(scope='function')
def admin(db_session, password_hash):
    return _make_user(db_session, password_hash, "Admin", "admin@courtside.test", ROLE_ADMIN)


@pytest.fixture(scope='function')
def kasir(db_session, password_hash):
    return _make_user(db_session, password_hash, "Kasir", "kasir@courtside.test", ROLE_KASIR)


@pytest.fixture(scope='function')
def owner_headers(owner):
    _, token = session_service.create_session(owner.id)
    return auth_headers(token)


@pytest.fixture(scope='function')
def admin_headers(admin):
    _, token = session_service.create_session(admin.id)
    return auth_headers(token)


@pytest.fixture(scope='function')
def kasir_headers(kasir):
    _, token = session_service.create_session(kasir.id)
    return auth_headers(token)


# =============================================================================
# Catalog and venue factories
# =============================================================================


@pytest.fixture(scope='function')
def sell_product(db_session):
    """Retail product: 15,000.00 each, 10 in stock."""
    return catalog_service.create_product({
        "name": "Energy Drink",
        "sku": "SELL-001",
        "type": PRODUCT_TYPE_SELL,
        "price_cents": 1500000,
        "stock": 10,
    })


@pytest.fixture(scope='function')
def rent_product(db_session):
    """Rental product: 50,000.00 per rental, 5 units."""
    return catalog_service.create_product({
        "name": "Padel Racket",
        "sku": "RENT-001",
        "type": PRODUCT_TYPE_RENT,
        "price_cents": 5000000,
        "stock": 5,
    })


@pytest.fixture(scope='function')
def menu(db_session):
    """Made-to-order menu item (stock not tracked)."""
    return catalog_service.create_menu({"name": "Iced Latte", "price_cents": 2500000})


@pytest.fixture(scope='function')
def tracked_menu(db_session):
    """Menu item with 3 portions left."""
    return catalog_service.create_menu({"name": "Banana Bread", "price_cents": 2000000, "stock": 3})


@pytest.fixture(scope='function')
def court(db_session):
    """Active indoor court at 100,000.00 per hour."""
    return venue_service.create_court({"name": "Court A", "type": "INDOOR", "price_per_hour_cents": 10000000})


@pytest.fixture(scope='function')
def table(db_session):
    return venue_service.create_table({"code": "T01", "name": "Table 1", "capacity": 4})


@pytest.fixture(scope='function')
def inventory(db_session, owner):
    """Venue asset with 10 units booked as the initial adjustment."""
    return inventory_service.create_inventory(
        {"name": "Ball Machine", "type": "ASSET", "quantity": 10, "location": "Store room"},
        actor_user_id=owner.id,
    )


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
