from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..time_utils import to_utc_z

BOOKING_PENDING = "PENDING"
BOOKING_CONFIRMED = "CONFIRMED"
BOOKING_CANCELLED = "CANCELLED"
BOOKING_COMPLETED = "COMPLETED"
VALID_BOOKING_STATUSES = (BOOKING_PENDING, BOOKING_CONFIRMED, BOOKING_CANCELLED, BOOKING_COMPLETED)

PAYMENT_UNPAID = "UNPAID"
PAYMENT_PARTIAL = "PARTIAL"
PAYMENT_PAID = "PAID"
VALID_BOOKING_PAYMENT_STATUSES = (PAYMENT_UNPAID, PAYMENT_PARTIAL, PAYMENT_PAID)


class Booking(db.Model):
    """
    Court reservation over the half-open interval [start_time, end_time).

    No two non-cancelled bookings of one court may overlap. booking_service
    enforces this under a court row lock; on PostgreSQL the migration adds
    an exclusion constraint as well.
    """
    __tablename__ = "bookings"
    __table_args__ = (
        db.CheckConstraint("end_time > start_time", name="ck_bookings_end_after_start"),
        db.Index("ix_bookings_court_start", "court_id", "start_time"),
        db.Index("ix_bookings_court_status", "court_id", "booking_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable booking number (e.g., "BK-20240115-0001")
    booking_number = db.Column(db.String(32), nullable=False, unique=True, index=True)
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)

    customer_name = db.Column(db.String(255), nullable=False)
    customer_phone = db.Column(db.String(32), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)

    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)

    price_per_hour_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_UNPAID)
    booking_status = db.Column(db.String(16), nullable=False, default=BOOKING_PENDING, index=True)

    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=True, index=True)
    notes = db.Column(db.Text, nullable=True)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    court = db.relationship("Court", backref=db.backref("bookings", lazy=True))
    transaction = db.relationship("Transaction")

    @property
    def duration_hours(self) -> Decimal:
        return (Decimal(self.duration_minutes) / Decimal(60)).quantize(Decimal("0.01"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "booking_number": self.booking_number,
            "court_id": self.court_id,
            "court_name": self.court.name if self.court else None,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_email": self.customer_email,
            "start_time": to_utc_z(self.start_time),
            "end_time": to_utc_z(self.end_time),
            "duration_hours": str(self.duration_hours),
            "price_per_hour_cents": self.price_per_hour_cents,
            "total_price_cents": self.total_price_cents,
            "payment_status": self.payment_status,
            "booking_status": self.booking_status,
            "transaction_id": self.transaction_id,
            "notes": self.notes,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
