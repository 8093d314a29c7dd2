from __future__ import annotations

import json

from ..extensions import db
from ..time_utils import to_utc_z

NOTIFY_ORDER_REQUEST = "ORDER_REQUEST"
NOTIFY_BOOKING = "BOOKING"
NOTIFY_TRANSACTION = "TRANSACTION"
NOTIFY_SYSTEM = "SYSTEM"
VALID_NOTIFICATION_TYPES = (NOTIFY_ORDER_REQUEST, NOTIFY_BOOKING, NOTIFY_TRANSACTION, NOTIFY_SYSTEM)


class Notification(db.Model):
    """Staff notification. user_id NULL means broadcast to every staff account."""
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_user_read", "user_id", "is_read"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(16), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    data = db.Column(db.Text, nullable=True)  # JSON

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    order_request_id = db.Column(db.Integer, db.ForeignKey("order_requests.id"), nullable=True)

    is_read = db.Column(db.Boolean, nullable=False, default=False)
    read_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "data": json.loads(self.data) if self.data else None,
            "user_id": self.user_id,
            "order_request_id": self.order_request_id,
            "is_read": self.is_read,
            "read_at": to_utc_z(self.read_at),
            "created_at": to_utc_z(self.created_at),
        }
