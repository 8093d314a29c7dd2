# Overview: Flask API routes for staff notifications and their live SSE stream.

"""
Notifications API

GET  /api/notifications                 list (broadcast + own), paginated
GET  /api/notifications/unread-count    badge counter
POST /api/notifications/<id>/read       mark one read
POST /api/notifications/read-all        mark everything visible read
GET  /api/notifications/stream          text/event-stream of new notifications

EventSource cannot send headers, so the stream also accepts ?token=.
Each event is ``event: notification`` with the notification id; a
``:keepalive`` comment goes out when nothing arrived for the heartbeat
interval.
"""

from __future__ import annotations

import json
import queue

from flask import Blueprint, Response, request, jsonify, g, current_app, stream_with_context

from ..errors import ServiceError
from ..extensions import notification_hub
from ..models.auth import STAFF
from ..services import notification_service, session_service
from ..decorators import require_auth, require_role
from .params import bool_arg, page_args, paged


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@require_auth
@require_role(*STAFF)
def list_notifications_route():
    page, limit = page_args()
    rows, total = notification_service.list_notifications(
        g.current_user.id,
        unread_only=bool(bool_arg("unread")),
        page=page,
        limit=limit,
    )
    body = paged("notifications", rows, total, page, limit)
    body["unread_count"] = notification_service.unread_count(g.current_user.id)
    return jsonify(body), 200


@notifications_bp.get("/unread-count")
@require_auth
@require_role(*STAFF)
def unread_count_route():
    return jsonify({"unread_count": notification_service.unread_count(g.current_user.id)}), 200


@notifications_bp.post("/<int:notification_id>/read")
@require_auth
@require_role(*STAFF)
def mark_read_route(notification_id: int):
    try:
        notification = notification_service.mark_as_read(notification_id, g.current_user.id)
        return jsonify({"notification": notification.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@notifications_bp.delete("/<int:notification_id>")
@require_auth
@require_role(*STAFF)
def delete_notification_route(notification_id: int):
    try:
        notification_service.delete_notification(notification_id, g.current_user.id)
        return jsonify({"message": "Notification deleted"}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@notifications_bp.post("/read-all")
@require_auth
@require_role(*STAFF)
def mark_all_read_route():
    updated = notification_service.mark_all_as_read(g.current_user.id)
    return jsonify({"updated": updated}), 200


def _format_event(payload: dict) -> str:
    return f"event: notification\nid: {payload.get('id')}\ndata: {json.dumps(payload)}\n\n"


@notifications_bp.get("/stream")
def stream_route():
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
    else:
        token = request.args.get("token")
    if not token:
        return jsonify({"error": "Authentication required"}), 401

    user = session_service.validate_session(token)
    if not user:
        return jsonify({"error": "Invalid or expired token"}), 401
    if user.role not in STAFF:
        return jsonify({"error": "Permission denied"}), 403

    user_id = user.id
    heartbeat = current_app.config["NOTIFICATION_HEARTBEAT_SECONDS"]
    subscriber = notification_hub.subscribe()
    current_app.logger.info("Notification stream opened for user %s", user_id)

    def event_stream():
        try:
            yield ":connected\n\n"
            while True:
                try:
                    payload = subscriber.get(timeout=heartbeat)
                except queue.Empty:
                    yield ":keepalive\n\n"
                    continue
                # targeted notifications go only to their user
                if payload.get("user_id") not in (None, user_id):
                    continue
                yield _format_event(payload)
        finally:
            notification_hub.unsubscribe(subscriber)

    return Response(
        stream_with_context(event_stream()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
