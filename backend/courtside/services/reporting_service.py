# Overview: Read-only dashboard and sales reports.

from __future__ import annotations

from datetime import date, datetime, timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import Booking, Menu, Product, ProductRentRecord, Table, Transaction, TransactionItem
from ..models.bookings import BOOKING_CANCELLED, BOOKING_COMPLETED, BOOKING_CONFIRMED
from ..models.ledger import ITEM_MENU, ITEM_PRODUCT, RENT_ACTIVE, REVENUE_STATUSES
from ..models.venue import TABLE_OCCUPIED
from ..money import percent_change
from ..time_utils import day_bounds, to_utc_z, utcnow

TOP_N = 5


def _revenue_between(start: datetime, end: datetime) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(Transaction.total_amount_cents), 0))
        .filter(
            Transaction.status.in_(REVENUE_STATUSES),
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )
        .scalar()
    )
    return int(total or 0)


def _bookings_between(start: datetime, end: datetime) -> int:
    return (
        db.session.query(Booking)
        .filter(
            Booking.booking_status.in_((BOOKING_CONFIRMED, BOOKING_COMPLETED)),
            Booking.start_time >= start,
            Booking.start_time < end,
        )
        .count()
    )


def dashboard_summary(today: date | None = None) -> dict:
    today = today or utcnow().date()
    today_start, today_end = day_bounds(today)
    yesterday_start, yesterday_end = day_bounds(today - timedelta(days=1))

    revenue_today = _revenue_between(today_start, today_end)
    revenue_yesterday = _revenue_between(yesterday_start, yesterday_end)
    bookings_today = _bookings_between(today_start, today_end)
    bookings_yesterday = _bookings_between(yesterday_start, yesterday_end)

    active_rentals = (
        db.session.query(ProductRentRecord)
        .filter(ProductRentRecord.status == RENT_ACTIVE)
        .count()
    )
    occupied_tables = (
        db.session.query(Table)
        .filter(Table.status == TABLE_OCCUPIED, Table.is_active.is_(True))
        .count()
    )
    total_tables = db.session.query(Table).filter(Table.is_active.is_(True)).count()

    return {
        "date": today.isoformat(),
        "revenue": {
            "today_cents": revenue_today,
            "yesterday_cents": revenue_yesterday,
            "trend_percent": percent_change(revenue_today, revenue_yesterday),
        },
        "bookings": {
            "today": bookings_today,
            "yesterday": bookings_yesterday,
            "trend_percent": percent_change(bookings_today, bookings_yesterday),
        },
        "active_rentals": active_rentals,
        "tables": {
            "occupied": occupied_tables,
            "total": total_tables,
        },
    }


def _top_items(start: datetime, end: datetime, item_type: str, model) -> list[dict]:
    fk = TransactionItem.product_id if item_type == ITEM_PRODUCT else TransactionItem.menu_id
    rows = (
        db.session.query(
            model.id,
            model.name,
            func.sum(TransactionItem.quantity).label("quantity"),
            func.sum(TransactionItem.subtotal_cents).label("revenue"),
        )
        .join(TransactionItem, fk == model.id)
        .join(Transaction, Transaction.id == TransactionItem.transaction_id)
        .filter(
            TransactionItem.item_type == item_type,
            Transaction.status.in_(REVENUE_STATUSES),
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )
        .group_by(model.id, model.name)
        .order_by(func.sum(TransactionItem.quantity).desc(), model.name.asc())
        .limit(TOP_N)
        .all()
    )
    return [
        {"id": rid, "name": name, "quantity": int(qty or 0), "revenue_cents": int(revenue or 0)}
        for rid, name, qty, revenue in rows
    ]


def sales_report(start: datetime, end: datetime) -> dict:
    """Revenue by transaction type plus booking totals and best sellers over [start, end)."""
    by_type = (
        db.session.query(
            Transaction.type,
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.total_amount_cents), 0),
        )
        .filter(
            Transaction.status.in_(REVENUE_STATUSES),
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )
        .group_by(Transaction.type)
        .all()
    )

    booking_count, booking_revenue = (
        db.session.query(
            func.count(Booking.id),
            func.coalesce(func.sum(Booking.total_price_cents), 0),
        )
        .filter(
            Booking.booking_status != BOOKING_CANCELLED,
            Booking.start_time >= start,
            Booking.start_time < end,
        )
        .one()
    )

    revenue_by_type = {
        tx_type: {"count": count, "revenue_cents": int(revenue or 0)}
        for tx_type, count, revenue in by_type
    }
    return {
        "start": to_utc_z(start),
        "end": to_utc_z(end),
        "total_revenue_cents": sum(v["revenue_cents"] for v in revenue_by_type.values()),
        "by_type": revenue_by_type,
        "bookings": {"count": booking_count, "revenue_cents": int(booking_revenue or 0)},
        "top_products": _top_items(start, end, ITEM_PRODUCT, Product),
        "top_menus": _top_items(start, end, ITEM_MENU, Menu),
    }
