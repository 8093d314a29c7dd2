# Overview: Atomic per-day document numbers (invoices, bookings).

from __future__ import annotations

from datetime import date

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DocumentSequence
from ..time_utils import utcnow

DOC_INVOICE = "INVOICE"
DOC_BOOKING = "BOOKING"

INVOICE_PREFIX = "INV"
BOOKING_PREFIX = "BK"


def _bump(document_type: str, period: str) -> int | None:
    stmt = (
        update(DocumentSequence)
        .where(
            DocumentSequence.document_type == document_type,
            DocumentSequence.period == period,
        )
        .values(next_number=DocumentSequence.next_number + 1)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        return None
    db.session.flush()
    current = (
        db.session.query(DocumentSequence.next_number)
        .filter_by(document_type=document_type, period=period)
        .scalar()
    )
    return current - 1


def next_daily_number(
    document_type: str,
    prefix: str,
    *,
    on_date: date | None = None,
    pad: int = 4,
) -> str:
    """
    Allocate the next "<PREFIX>-YYYYMMDD-NNNN" number for the day.

    Must run inside the caller's unit of work: the counter row is bumped with
    a single UPDATE (which holds the row lock until commit), and a rolled-back
    checkout gives its number back. The first allocation of a day inserts the
    counter row under a savepoint so a concurrent first insert can be retried
    without discarding the caller's pending work.
    """
    period = (on_date or utcnow().date()).strftime("%Y%m%d")

    number = _bump(document_type, period)
    if number is None:
        try:
            with db.session.begin_nested():
                db.session.add(DocumentSequence(document_type=document_type, period=period, next_number=2))
            number = 1
        except IntegrityError:
            number = _bump(document_type, period)
            if number is None:
                raise

    return f"{prefix}-{period}-{number:0{pad}d}"


def next_invoice_number(on_date: date | None = None) -> str:
    return next_daily_number(DOC_INVOICE, INVOICE_PREFIX, on_date=on_date)


def next_booking_number(on_date: date | None = None) -> str:
    return next_daily_number(DOC_BOOKING, BOOKING_PREFIX, on_date=on_date)
