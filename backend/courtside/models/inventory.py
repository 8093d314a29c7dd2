from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

INVENTORY_ASSET = "ASSET"
INVENTORY_CONSUMABLE = "CONSUMABLE"
VALID_INVENTORY_TYPES = (INVENTORY_ASSET, INVENTORY_CONSUMABLE)

CONDITION_GOOD = "GOOD"
CONDITION_DAMAGED = "DAMAGED"
CONDITION_NEED_REPAIR = "NEED_REPAIR"
CONDITION_BROKEN = "BROKEN"
VALID_CONDITIONS = (CONDITION_GOOD, CONDITION_DAMAGED, CONDITION_NEED_REPAIR, CONDITION_BROKEN)

INVENTORY_ACTIVE = "ACTIVE"
INVENTORY_INACTIVE = "INACTIVE"
INVENTORY_DISPOSED = "DISPOSED"
VALID_INVENTORY_STATUSES = (INVENTORY_ACTIVE, INVENTORY_INACTIVE, INVENTORY_DISPOSED)

CHANGE_ADD = "ADD"
CHANGE_REMOVE = "REMOVE"
CHANGE_CORRECTION = "CORRECTION"
VALID_CHANGE_TYPES = (CHANGE_ADD, CHANGE_REMOVE, CHANGE_CORRECTION)


class Inventory(db.Model):
    """
    Venue-owned equipment and consumables (not for sale).

    quantity is written only through inventory_service.adjust_stock and always
    equals quantity_after of the newest InventoryAdjustment.
    """
    __tablename__ = "inventories"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_inventories_quantity_non_negative"),
        db.Index("ix_inventories_type_status", "type", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)

    type = db.Column(db.String(16), nullable=False, default=INVENTORY_ASSET)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=False, default="pcs")
    condition = db.Column(db.String(16), nullable=False, default=CONDITION_GOOD)
    status = db.Column(db.String(16), nullable=False, default=INVENTORY_ACTIVE)

    owner_name = db.Column(db.String(255), nullable=True)
    purchase_date = db.Column(db.DateTime, nullable=True)
    purchase_price_cents = db.Column(db.Integer, nullable=True)
    location = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "type": self.type,
            "quantity": self.quantity,
            "unit": self.unit,
            "condition": self.condition,
            "status": self.status,
            "owner_name": self.owner_name,
            "purchase_date": to_utc_z(self.purchase_date),
            "purchase_price_cents": self.purchase_price_cents,
            "location": self.location,
            "notes": self.notes,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryAdjustment(db.Model):
    """Append-only: quantity_after = quantity_before + change_amount."""
    __tablename__ = "inventory_adjustments"
    __table_args__ = (
        db.CheckConstraint(
            "quantity_after = quantity_before + change_amount",
            name="ck_inventory_adjustments_balanced",
        ),
        db.Index("ix_inventory_adjustments_inventory_created", "inventory_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventories.id"), nullable=False)

    quantity_before = db.Column(db.Integer, nullable=False)
    quantity_after = db.Column(db.Integer, nullable=False)
    change_amount = db.Column(db.Integer, nullable=False)
    change_type = db.Column(db.String(16), nullable=False)  # ADD, REMOVE, CORRECTION
    reason = db.Column(db.Text, nullable=False)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    inventory = db.relationship("Inventory", backref=db.backref("adjustments", lazy=True))
    created_by = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "inventory_id": self.inventory_id,
            "quantity_before": self.quantity_before,
            "quantity_after": self.quantity_after,
            "change_amount": self.change_amount,
            "change_type": self.change_type,
            "reason": self.reason,
            "created_by_user_id": self.created_by_user_id,
            "created_by_name": self.created_by.name if self.created_by else None,
            "created_at": to_utc_z(self.created_at),
        }
