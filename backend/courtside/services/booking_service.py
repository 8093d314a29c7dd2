# Overview: Booking engine: court reservations with overlap detection.

"""
Bookings occupy the half-open interval [start_time, end_time); a slot
ending at 10:00 and one starting at 10:00 do not conflict.

The overlap check and the insert happen in the same unit with the court
row locked (BEGIN IMMEDIATE on SQLite), so two concurrent requests for the
same slot cannot both pass the check.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

from flask import current_app

from ..errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Booking, Court, Transaction, TransactionItem
from ..models.bookings import (
    BOOKING_CANCELLED,
    BOOKING_COMPLETED,
    BOOKING_CONFIRMED,
    BOOKING_PENDING,
    PAYMENT_PAID,
    PAYMENT_PARTIAL,
    PAYMENT_UNPAID,
    VALID_BOOKING_PAYMENT_STATUSES,
)
from ..models.ledger import (
    ITEM_BOOKING,
    PAYMENT_CASH,
    TX_CANCELLED,
    TX_PAID,
    TX_PENDING,
    TX_TYPE_BOOKING,
)
from ..models.notifications import NOTIFY_BOOKING
from ..models.venue import COURT_ACTIVE
from ..money import format_amount, round_cents
from ..time_utils import day_bounds, to_utc_z
from . import notification_service
from .concurrency import lock_for_update, run_atomic
from .pagination import paginate
from .sequence_service import next_booking_number, next_invoice_number

MIN_DURATION = timedelta(hours=1)


def validate_slot(start_time: datetime, end_time: datetime) -> None:
    if start_time is None or end_time is None:
        raise ValidationError("start_time and end_time are required")
    if end_time <= start_time:
        raise ValidationError("end_time must be after start_time")
    if end_time - start_time < MIN_DURATION:
        raise ValidationError("Minimum booking duration is 1 hour")


def compute_price(price_per_hour_cents: int, start_time: datetime, end_time: datetime) -> tuple[int, int]:
    """Returns (duration_minutes, total_price_cents); price rounds half-up to the cent."""
    seconds = int((end_time - start_time).total_seconds())
    hours = Decimal(seconds) / Decimal(3600)
    return seconds // 60, round_cents(hours * Decimal(price_per_hour_cents))


def _payment_state(paid: int, total: int, declared: str | None = None) -> tuple[str, str]:
    """
    (payment_status, booking_status) for a paid amount.

    With nothing paid at the counter the declared status (e.g. PARTIAL for a
    deposit taken by bank transfer) is kept; it defaults to UNPAID.
    """
    if paid >= total:
        return PAYMENT_PAID, BOOKING_CONFIRMED
    if paid > 0:
        return PAYMENT_PARTIAL, BOOKING_PENDING
    return declared or PAYMENT_UNPAID, BOOKING_PENDING


def find_overlaps(court_id: int, start_time: datetime, end_time: datetime, exclude_id: int | None = None):
    query = db.session.query(Booking).filter(
        Booking.court_id == court_id,
        Booking.booking_status != BOOKING_CANCELLED,
        Booking.start_time < end_time,
        Booking.end_time > start_time,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.all()


def create_booking(
    *,
    court_id: int,
    customer_name: str,
    customer_phone: str,
    start_time: datetime,
    end_time: datetime,
    customer_email: str | None = None,
    paid_amount_cents: int = 0,
    payment_status: str | None = None,
    notes: str | None = None,
    user_id: int | None = None,
) -> tuple[Booking, Transaction]:
    """
    Reserve a court and open its BOOKING transaction in one unit.

    Raises NotFoundError (court), InvalidStateError (court not ACTIVE) or
    ConflictError (slot overlaps a live booking).

    payment_status is only a hint for the unpaid case; any counter payment
    decides the status on its own. PAID cannot be declared without paying.
    """
    validate_slot(start_time, end_time)
    if not customer_name or not customer_phone:
        raise ValidationError("customer_name and customer_phone are required")
    paid = paid_amount_cents or 0
    if paid < 0:
        raise ValidationError("paid_amount_cents must be >= 0")
    if payment_status is not None:
        if payment_status not in VALID_BOOKING_PAYMENT_STATUSES:
            raise ValidationError(
                f"payment_status must be one of {', '.join(VALID_BOOKING_PAYMENT_STATUSES)}"
            )
        if payment_status == PAYMENT_PAID and paid == 0:
            raise ValidationError("payment_status PAID requires paid_amount_cents")

    def _op():
        court = lock_for_update(db.session.query(Court).filter_by(id=court_id)).first()
        if not court:
            raise NotFoundError("Court not found", {"id": court_id})
        if court.status != COURT_ACTIVE:
            raise InvalidStateError(f"Court is not available ({court.status})", {"id": court_id})

        overlaps = find_overlaps(court.id, start_time, end_time)
        if overlaps:
            raise ConflictError(
                "Court is already booked for this time slot",
                {
                    "conflicts": [
                        {
                            "booking_number": b.booking_number,
                            "start_time": to_utc_z(b.start_time),
                            "end_time": to_utc_z(b.end_time),
                        }
                        for b in overlaps
                    ]
                },
            )

        duration_minutes, total = compute_price(court.price_per_hour_cents, start_time, end_time)
        initial_payment, booking_status = _payment_state(paid, total, payment_status)

        tx = Transaction(
            invoice_number=next_invoice_number(),
            type=TX_TYPE_BOOKING,
            customer_name=customer_name,
            total_amount_cents=total,
            paid_amount_cents=paid,
            change_amount_cents=max(0, paid - total),
            payment_method=PAYMENT_CASH,
            status=TX_PAID if paid >= total else TX_PENDING,
            created_by_user_id=user_id,
        )
        db.session.add(tx)
        db.session.flush()

        booking = Booking(
            booking_number=next_booking_number(),
            court_id=court.id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            price_per_hour_cents=court.price_per_hour_cents,
            total_price_cents=total,
            payment_status=initial_payment,
            booking_status=booking_status,
            transaction_id=tx.id,
            notes=notes,
            created_by_user_id=user_id,
        )
        db.session.add(booking)

        db.session.add(TransactionItem(
            transaction_id=tx.id,
            item_type=ITEM_BOOKING,
            quantity=1,
            unit_price_cents=total,
            subtotal_cents=total,
            stock_deducted=False,
            notes=f"Court Booking: {court.name}",
        ))
        return booking, tx

    booking, tx = run_atomic(_op)
    current_app.logger.info("Booking %s created for court %s", booking.booking_number, booking.court_id)

    notification_service.publish(
        NOTIFY_BOOKING,
        "New Court Booking",
        f"{booking.customer_name} booked {booking.court.name} for {format_amount(booking.total_price_cents)}",
        data={
            "booking_id": booking.id,
            "booking_number": booking.booking_number,
            "court_id": booking.court_id,
            "start_time": to_utc_z(booking.start_time),
            "end_time": to_utc_z(booking.end_time),
            "total_price": format_amount(booking.total_price_cents),
        },
    )
    return booking, tx


def _lock_booking(booking_id: int) -> Booking:
    booking = lock_for_update(db.session.query(Booking).filter_by(id=booking_id)).first()
    if not booking:
        raise NotFoundError("Booking not found", {"id": booking_id})
    return booking


def cancel_booking(booking_id: int) -> Booking:
    """Cancel the booking and its transaction together; frees the slot."""
    def _op():
        booking = _lock_booking(booking_id)
        if booking.booking_status == BOOKING_CANCELLED:
            raise InvalidStateError("Booking already cancelled")

        booking.booking_status = BOOKING_CANCELLED
        if booking.transaction_id:
            tx = lock_for_update(db.session.query(Transaction).filter_by(id=booking.transaction_id)).first()
            if tx:
                tx.status = TX_CANCELLED
        return booking

    booking = run_atomic(_op)
    current_app.logger.info("Booking %s cancelled", booking.booking_number)
    return booking


def complete_booking(booking_id: int) -> Booking:
    """Mark the booking played; a cancelled booking no longer holds its slot and cannot complete."""
    def _op():
        booking = _lock_booking(booking_id)
        if booking.booking_status == BOOKING_CANCELLED:
            raise InvalidStateError("Cannot complete a cancelled booking", {"id": booking_id})
        booking.booking_status = BOOKING_COMPLETED
        return booking

    return run_atomic(_op)


def get_court_availability(court_id: int, day: date) -> dict:
    """Busy intervals of non-cancelled bookings starting within the day."""
    court = db.session.get(Court, court_id)
    if not court:
        raise NotFoundError("Court not found", {"id": court_id})

    start, end = day_bounds(day)
    bookings = (
        db.session.query(Booking)
        .filter(
            Booking.court_id == court_id,
            Booking.booking_status != BOOKING_CANCELLED,
            Booking.start_time >= start,
            Booking.start_time < end,
        )
        .order_by(Booking.start_time.asc())
        .all()
    )
    return {
        "court": court.to_dict(),
        "date": day.isoformat(),
        "busy": [
            {
                "start_time": to_utc_z(b.start_time),
                "end_time": to_utc_z(b.end_time),
                "booking_status": b.booking_status,
            }
            for b in bookings
        ],
    }


def get_booking(booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", {"id": booking_id})
    return booking


def list_bookings(
    *,
    court_id: int | None = None,
    booking_status: str | None = None,
    payment_status: str | None = None,
    on_date: date | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    query = db.session.query(Booking)
    if court_id:
        query = query.filter(Booking.court_id == court_id)
    if booking_status:
        query = query.filter(Booking.booking_status == booking_status)
    if payment_status:
        query = query.filter(Booking.payment_status == payment_status)
    if on_date:
        start, end = day_bounds(on_date)
        query = query.filter(Booking.start_time >= start, Booking.start_time < end)
    return paginate(query.order_by(Booking.start_time.desc(), Booking.id.desc()), page, limit)
