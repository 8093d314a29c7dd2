# Overview: Staff notification sink (persist + live fan-out) and its read side.

"""
Notifications are a one-way sink. publish() is called only after the owning
unit of work has committed; it writes the Notification row in its own commit
and pushes the serialized row to every live SSE subscriber. Any failure is
logged and absorbed so a broken sink can never undo a checkout or booking.
"""

from __future__ import annotations

import json

from flask import current_app
from sqlalchemy import or_

from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from ..extensions import db, notification_hub
from ..models import Notification
from ..models.notifications import VALID_NOTIFICATION_TYPES
from ..time_utils import utcnow
from .pagination import paginate


def publish(
    notification_type: str,
    title: str,
    message: str,
    *,
    data: dict | None = None,
    user_id: int | None = None,
    order_request_id: int | None = None,
) -> Notification | None:
    """Persist and broadcast a notification. Never raises."""
    try:
        if notification_type not in VALID_NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type: {notification_type}")

        notification = Notification(
            type=notification_type,
            title=title,
            message=message,
            data=json.dumps(data, default=str) if data is not None else None,
            user_id=user_id,
            order_request_id=order_request_id,
            is_read=False,
        )
        db.session.add(notification)
        db.session.commit()

        notification_hub.publish(notification.to_dict())
        return notification
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to publish %s notification: %s", notification_type, title)
        return None


def _visible_to(user_id: int):
    return or_(Notification.user_id.is_(None), Notification.user_id == user_id)


def list_notifications(
    user_id: int,
    *,
    unread_only: bool = False,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Notification], int]:
    query = db.session.query(Notification).filter(_visible_to(user_id))
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    return paginate(query.order_by(Notification.created_at.desc(), Notification.id.desc()), page, limit)


def unread_count(user_id: int) -> int:
    return (
        db.session.query(Notification)
        .filter(_visible_to(user_id), Notification.is_read.is_(False))
        .count()
    )


def mark_as_read(notification_id: int, user_id: int) -> Notification:
    notification = (
        db.session.query(Notification)
        .filter(Notification.id == notification_id, _visible_to(user_id))
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        db.session.commit()
    return notification


def mark_all_as_read(user_id: int) -> int:
    rows = (
        db.session.query(Notification)
        .filter(_visible_to(user_id), Notification.is_read.is_(False))
        .all()
    )
    now = utcnow()
    for notification in rows:
        notification.is_read = True
        notification.read_at = now
    db.session.commit()
    return len(rows)


def delete_notification(notification_id: int, user_id: int) -> None:
    """Delete a broadcast notification or one addressed to the caller."""
    notification = db.session.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found", {"id": notification_id})
    if notification.user_id is not None and notification.user_id != user_id:
        raise PermissionDeniedError("Cannot delete another user's notification", {"id": notification_id})

    db.session.delete(notification)
    db.session.commit()
    current_app.logger.info("Notification %s deleted by user %s", notification_id, user_id)
