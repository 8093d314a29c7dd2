"""
Concurrency tests against a file-backed SQLite database.

The in-memory database shares one connection, so it cannot show two units of
work racing. These tests build a separate app on a file database and let
several threads hit the same slot or the last unit of stock at once.

Verifies:
- Exactly one of several simultaneous bookings for a slot is created
- Exactly one of several simultaneous checkouts takes the last unit
"""

import threading
from datetime import datetime, timedelta

import pytest

from courtside import create_app
from courtside.errors import ConflictError
from courtside.extensions import db
from courtside.models import Booking, Product, Transaction
from courtside.models.catalog import PRODUCT_TYPE_SELL
from courtside.services import booking_service, catalog_service, transaction_service, venue_service

WORKERS = 6
SLOT_START = datetime(2030, 2, 1, 18, 0)


@pytest.fixture
def race_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'race.sqlite3'}",
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def _race(app, func):
    """Run func in WORKERS threads released together; returns one outcome per thread."""
    barrier = threading.Barrier(WORKERS)
    outcomes = []
    lock = threading.Lock()

    def worker():
        with app.app_context():
            barrier.wait()
            try:
                func()
                outcome = "ok"
            except ConflictError:
                outcome = "conflict"
            except Exception as exc:
                outcome = type(exc).__name__
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


# =============================================================================
# RACES
# =============================================================================


class TestRaces:

    def test_one_booking_per_slot(self, race_app):
        with race_app.app_context():
            court_id = venue_service.create_court({"name": "Court A", "price_per_hour_cents": 10000000}).id

        def book():
            booking_service.create_booking(
                court_id=court_id,
                customer_name="Andi",
                customer_phone="0812000111",
                start_time=SLOT_START,
                end_time=SLOT_START + timedelta(hours=2),
            )

        outcomes = _race(race_app, book)

        assert sorted(outcomes) == ["conflict"] * (WORKERS - 1) + ["ok"]
        with race_app.app_context():
            assert db.session.query(Booking).count() == 1
            assert db.session.query(Transaction).count() == 1

    def test_last_unit_sold_once(self, race_app):
        with race_app.app_context():
            product_id = catalog_service.create_product({
                "name": "Last Racket Grip",
                "sku": "SELL-LAST",
                "type": PRODUCT_TYPE_SELL,
                "price_cents": 1500000,
                "stock": 1,
            }).id

        def checkout():
            transaction_service.create_transaction(
                tx_type="POS",
                items=[{"item_type": "PRODUCT", "id": product_id, "quantity": 1}],
                payment_method="CASH",
                paid_amount_cents=1500000,
            )

        outcomes = _race(race_app, checkout)

        assert sorted(outcomes) == ["conflict"] * (WORKERS - 1) + ["ok"]
        with race_app.app_context():
            assert db.session.get(Product, product_id).stock == 0
            assert db.session.query(Transaction).count() == 1
