"""
Reporting tests.

Verifies:
- Dashboard revenue counts PAID/COMPLETED only, with day-over-day trend
- Bookings are bucketed by start time, cancelled and unpaid ones excluded
- Sales report totals and best sellers
"""

from datetime import date, datetime, timedelta

import pytest

from courtside.services import booking_service, reporting_service, transaction_service, venue_service
from courtside.time_utils import day_bounds, utcnow


def _sell(product, quantity=1, tx_type="POS"):
    return transaction_service.create_transaction(
        tx_type=tx_type,
        items=[{"item_type": "PRODUCT", "id": product.id, "quantity": quantity}],
        payment_method="CASH",
        paid_amount_cents=product.price_cents * quantity,
    )


def _book(court, start, hours=1, paid=None):
    end = start + timedelta(hours=hours)
    return booking_service.create_booking(
        court_id=court.id,
        customer_name="Rina",
        customer_phone="0812000",
        start_time=start,
        end_time=end,
        paid_amount_cents=court.price_per_hour_cents * hours if paid is None else paid,
    )


# =============================================================================
# DASHBOARD
# =============================================================================


class TestDashboard:

    def test_empty_day(self, db_session):
        summary = reporting_service.dashboard_summary(date(2030, 1, 1))

        assert summary["date"] == "2030-01-01"
        assert summary["revenue"] == {"today_cents": 0, "yesterday_cents": 0, "trend_percent": 0.0}
        assert summary["bookings"]["today"] == 0
        assert summary["active_rentals"] == 0
        assert summary["tables"] == {"occupied": 0, "total": 0}

    def test_revenue_trend(self, db_session, sell_product):
        _sell(sell_product, 2)
        yesterday_tx = _sell(sell_product, 1)
        yesterday_tx.created_at = yesterday_tx.created_at - timedelta(days=1)
        db_session.commit()
        dropped = _sell(sell_product, 3)
        transaction_service.cancel_transaction(dropped.id)

        summary = reporting_service.dashboard_summary(utcnow().date())

        assert summary["revenue"]["today_cents"] == 3000000
        assert summary["revenue"]["yesterday_cents"] == 1500000
        assert summary["revenue"]["trend_percent"] == 100.0

    def test_bookings_by_start_day(self, db_session, court):
        day = datetime(2030, 6, 10, 9, 0)
        _book(court, day)
        _book(court, day + timedelta(hours=2))
        _book(court, day + timedelta(hours=4), paid=0)
        cancelled, _ = _book(court, day + timedelta(hours=6))
        booking_service.cancel_booking(cancelled.id)
        _book(court, day - timedelta(days=1))

        summary = reporting_service.dashboard_summary(day.date())

        assert summary["bookings"] == {"today": 2, "yesterday": 1, "trend_percent": 100.0}

    def test_rentals_and_tables(self, db_session, rent_product, table):
        _sell(rent_product, tx_type="RENTAL")
        venue_service.create_table({"code": "T02", "name": "Table 2"})
        venue_service.set_table_status(table.id, "OCCUPIED", customer_name="Budi")

        summary = reporting_service.dashboard_summary()

        assert summary["active_rentals"] == 1
        assert summary["tables"] == {"occupied": 1, "total": 2}


# =============================================================================
# SALES REPORT
# =============================================================================


class TestSalesReport:

    def test_by_type_and_top_products(self, db_session, sell_product, rent_product, menu):
        _sell(sell_product, 3)
        _sell(sell_product, 1)
        _sell(rent_product, 1, tx_type="RENTAL")
        transaction_service.create_transaction(
            tx_type="POS",
            items=[{"item_type": "MENU", "id": menu.id, "quantity": 2}],
            payment_method="QRIS",
            paid_amount_cents=5000000,
        )

        start, _ = day_bounds(utcnow().date())
        report = reporting_service.sales_report(start, start + timedelta(days=1))

        assert report["by_type"]["POS"] == {"count": 3, "revenue_cents": 11000000}
        assert report["by_type"]["RENTAL"] == {"count": 1, "revenue_cents": 5000000}
        assert report["total_revenue_cents"] == 16000000
        assert report["top_products"][0] == {
            "id": sell_product.id,
            "name": "Energy Drink",
            "quantity": 4,
            "revenue_cents": 6000000,
        }
        assert report["top_menus"][0]["quantity"] == 2

    def test_booking_totals(self, db_session, court):
        day = datetime(2030, 6, 10, 9, 0)
        _book(court, day, hours=2)
        cancelled, _ = _book(court, day + timedelta(hours=3))
        booking_service.cancel_booking(cancelled.id)

        start, end = day_bounds(day.date())
        report = reporting_service.sales_report(start, end)

        assert report["bookings"] == {"count": 1, "revenue_cents": 20000000}
        assert report["start"] == "2030-06-10T00:00:00Z"


# =============================================================================
# HTTP
# =============================================================================


class TestReportRoutes:

    def test_dashboard_date_param(self, client, owner_headers):
        resp = client.get("/api/reports/dashboard?date=2030-01-01", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.get_json()["date"] == "2030-01-01"

    def test_bad_date_is_400(self, client, owner_headers):
        resp = client.get("/api/reports/dashboard?date=yesterday", headers=owner_headers)
        assert resp.status_code == 400

    def test_start_after_end_is_400(self, client, admin_headers):
        resp = client.get("/api/reports/sales?start=2030-01-05&end=2030-01-01", headers=admin_headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize("path", ["/api/reports/product-rentals", "/api/reports/product-sales"])
    def test_product_reports(self, client, owner_headers, sell_product, rent_product, path):
        resp = client.get(path, headers=owner_headers)
        assert resp.status_code == 200
        assert isinstance(resp.get_json()["products"], list)
