from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

ORDER_PENDING = "PENDING"
ORDER_APPROVED = "APPROVED"
ORDER_PREPARING = "PREPARING"
ORDER_SERVED = "SERVED"
ORDER_REJECTED = "REJECTED"
ORDER_CANCELLED = "CANCELLED"
VALID_ORDER_STATUSES = (
    ORDER_PENDING,
    ORDER_APPROVED,
    ORDER_PREPARING,
    ORDER_SERVED,
    ORDER_REJECTED,
    ORDER_CANCELLED,
)


class OrderRequest(db.Model):
    """
    Guest self-order placed from a table QR code.

    transaction_id is set only when the order reaches SERVED.
    """
    __tablename__ = "order_requests"
    __table_args__ = (
        db.Index("ix_order_requests_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # e.g., "ORD-20240115-K7QZ"
    order_number = db.Column(db.String(32), nullable=False, unique=True, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey("tables.id"), nullable=False, index=True)
    customer_name = db.Column(db.String(255), nullable=False)

    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default=ORDER_PENDING)
    notes = db.Column(db.Text, nullable=True)

    approved_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejected_reason = db.Column(db.Text, nullable=True)

    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    table = db.relationship("Table")
    transaction = db.relationship("Transaction")
    items = db.relationship(
        "OrderRequestItem",
        backref="order_request",
        lazy=True,
        order_by="OrderRequestItem.id",
    )

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "table_id": self.table_id,
            "table_code": self.table.code if self.table else None,
            "table_name": self.table.name if self.table else None,
            "customer_name": self.customer_name,
            "total_amount_cents": self.total_amount_cents,
            "status": self.status,
            "notes": self.notes,
            "approved_by_user_id": self.approved_by_user_id,
            "approved_at": to_utc_z(self.approved_at),
            "rejected_reason": self.rejected_reason,
            "transaction_id": self.transaction_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderRequestItem(db.Model):
    __tablename__ = "order_request_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_request_id = db.Column(db.Integer, db.ForeignKey("order_requests.id"), nullable=False, index=True)
    menu_id = db.Column(db.Integer, db.ForeignKey("menus.id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    subtotal_cents = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    menu = db.relationship("Menu")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_request_id": self.order_request_id,
            "menu_id": self.menu_id,
            "menu_name": self.menu.name if self.menu else None,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "subtotal_cents": self.subtotal_cents,
            "notes": self.notes,
        }
