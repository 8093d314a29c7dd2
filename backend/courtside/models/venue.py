from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

TABLE_EMPTY = "EMPTY"
TABLE_OCCUPIED = "OCCUPIED"
VALID_TABLE_STATUSES = (TABLE_EMPTY, TABLE_OCCUPIED)

COURT_INDOOR = "INDOOR"
COURT_OUTDOOR = "OUTDOOR"
VALID_COURT_TYPES = (COURT_INDOOR, COURT_OUTDOOR)

COURT_ACTIVE = "ACTIVE"
COURT_MAINTENANCE = "MAINTENANCE"
COURT_INACTIVE = "INACTIVE"
VALID_COURT_STATUSES = (COURT_ACTIVE, COURT_MAINTENANCE, COURT_INACTIVE)


class Table(db.Model):
    """
    Café table.

    OCCUPIED iff current_customer_name and occupied_at are set; the three
    fields are only ever written together (see venue_service).
    """
    __tablename__ = "tables"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    capacity = db.Column(db.Integer, nullable=False, default=4)
    location = db.Column(db.String(255), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=TABLE_EMPTY, index=True)
    current_customer_name = db.Column(db.String(255), nullable=True)
    current_customer_phone = db.Column(db.String(32), nullable=True)
    occupied_at = db.Column(db.DateTime, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "capacity": self.capacity,
            "location": self.location,
            "status": self.status,
            "current_customer_name": self.current_customer_name,
            "current_customer_phone": self.current_customer_phone,
            "occupied_at": to_utc_z(self.occupied_at),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Court(db.Model):
    """Rentable court; bookable only while ACTIVE."""
    __tablename__ = "courts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(16), nullable=False, default=COURT_INDOOR)
    surface = db.Column(db.String(64), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=COURT_ACTIVE, index=True)
    price_per_hour_cents = db.Column(db.Integer, nullable=False)
    is_visible = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "type": self.type,
            "surface": self.surface,
            "status": self.status,
            "price_per_hour_cents": self.price_per_hour_cents,
            "is_visible": self.is_visible,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
