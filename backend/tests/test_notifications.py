"""
Notification sink tests.

Verifies:
- publish persists and fans out to live subscribers, and never raises
- Broadcast vs targeted visibility, read state and unread counts
- Staff delete their own or broadcast notifications, never someone else's
- The SSE stream is staff-only
"""

import queue

import pytest

from courtside.errors import NotFoundError, PermissionDeniedError
from courtside.extensions import notification_hub
from courtside.models import Notification
from courtside.realtime import NotificationHub
from courtside.services import notification_service, session_service, transaction_service


@pytest.fixture
def subscriber():
    q = notification_hub.subscribe()
    yield q
    notification_hub.unsubscribe(q)


# =============================================================================
# HUB
# =============================================================================


class TestNotificationHub:

    def test_fan_out_to_every_subscriber(self):
        hub = NotificationHub()
        first, second = hub.subscribe(), hub.subscribe()

        assert hub.publish({"id": 1}) == 2
        assert first.get_nowait() == {"id": 1}
        assert second.get_nowait() == {"id": 1}

    def test_unsubscribe(self):
        hub = NotificationHub()
        q = hub.subscribe()
        hub.unsubscribe(q)
        hub.unsubscribe(q)

        assert hub.subscriber_count == 0
        assert hub.publish({"id": 1}) == 0

    def test_full_queue_drops_message(self, monkeypatch):
        monkeypatch.setattr("courtside.realtime.SUBSCRIBER_QUEUE_SIZE", 1)
        hub = NotificationHub()
        q = hub.subscribe()

        assert hub.publish({"id": 1}) == 1
        assert hub.publish({"id": 2}) == 0
        assert q.get_nowait() == {"id": 1}
        with pytest.raises(queue.Empty):
            q.get_nowait()


# =============================================================================
# PUBLISH
# =============================================================================


class TestPublish:

    def test_persists_and_broadcasts(self, db_session, subscriber):
        notification = notification_service.publish(
            "SYSTEM", "Hello", "World", data={"answer": 42}
        )

        assert notification.id is not None
        assert db_session.query(Notification).count() == 1
        payload = subscriber.get_nowait()
        assert payload["id"] == notification.id
        assert payload["data"] == {"answer": 42}
        assert payload["is_read"] is False

    def test_unknown_type_is_absorbed(self, db_session, subscriber):
        assert notification_service.publish("GOSSIP", "x", "y") is None
        assert db_session.query(Notification).count() == 0
        assert subscriber.empty()

    def test_checkout_survives_broken_sink(self, db_session, monkeypatch, sell_product):
        def boom(payload):
            raise RuntimeError("hub down")

        monkeypatch.setattr(notification_hub, "publish", boom)
        tx = transaction_service.create_transaction(
            tx_type="POS",
            items=[{"item_type": "PRODUCT", "id": sell_product.id, "quantity": 1}],
            payment_method="CASH",
            paid_amount_cents=1500000,
        )

        assert tx.status == "PAID"
        assert sell_product.stock == 9


# =============================================================================
# READ SIDE
# =============================================================================


class TestReadState:

    def test_targeted_visible_only_to_recipient(self, db_session, owner, kasir):
        notification_service.publish("SYSTEM", "All", "broadcast")
        notification_service.publish("SYSTEM", "Mine", "for owner", user_id=owner.id)

        owner_rows, owner_total = notification_service.list_notifications(owner.id)
        kasir_rows, kasir_total = notification_service.list_notifications(kasir.id)

        assert owner_total == 2
        assert kasir_total == 1
        assert [n.title for n in kasir_rows] == ["All"]

    def test_mark_as_read(self, db_session, kasir):
        notification = notification_service.publish("SYSTEM", "All", "broadcast")
        assert notification_service.unread_count(kasir.id) == 1

        read = notification_service.mark_as_read(notification.id, kasir.id)

        assert read.is_read is True
        assert read.read_at is not None
        assert notification_service.unread_count(kasir.id) == 0

    def test_cannot_read_someone_elses(self, db_session, owner, kasir):
        private = notification_service.publish("SYSTEM", "Mine", "for owner", user_id=owner.id)
        with pytest.raises(NotFoundError):
            notification_service.mark_as_read(private.id, kasir.id)

    def test_mark_all_as_read(self, db_session, owner, kasir):
        notification_service.publish("SYSTEM", "A", "a")
        notification_service.publish("SYSTEM", "B", "b")
        notification_service.publish("SYSTEM", "C", "c", user_id=owner.id)

        assert notification_service.mark_all_as_read(kasir.id) == 2
        assert notification_service.unread_count(kasir.id) == 0
        assert notification_service.unread_count(owner.id) == 1

    def test_unread_only_filter(self, db_session, kasir):
        first = notification_service.publish("SYSTEM", "A", "a")
        notification_service.publish("SYSTEM", "B", "b")
        notification_service.mark_as_read(first.id, kasir.id)

        rows, total = notification_service.list_notifications(kasir.id, unread_only=True)
        assert total == 1
        assert rows[0].title == "B"

    def test_delete_own_and_broadcast(self, db_session, kasir):
        mine = notification_service.publish("SYSTEM", "Mine", "for kasir", user_id=kasir.id)
        everyone = notification_service.publish("SYSTEM", "All", "broadcast")

        notification_service.delete_notification(mine.id, kasir.id)
        notification_service.delete_notification(everyone.id, kasir.id)

        assert db_session.query(Notification).count() == 0

    def test_cannot_delete_someone_elses(self, db_session, owner, kasir):
        private = notification_service.publish("SYSTEM", "Mine", "for owner", user_id=owner.id)

        with pytest.raises(PermissionDeniedError):
            notification_service.delete_notification(private.id, kasir.id)
        assert db_session.query(Notification).count() == 1

    def test_delete_missing(self, db_session, kasir):
        with pytest.raises(NotFoundError):
            notification_service.delete_notification(424242, kasir.id)


# =============================================================================
# HTTP
# =============================================================================


class TestNotificationRoutes:

    def test_list_includes_unread_count(self, client, kasir_headers):
        notification_service.publish("SYSTEM", "A", "a")

        resp = client.get("/api/notifications", headers=kasir_headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["unread_count"] == 1
        assert body["notifications"][0]["title"] == "A"

    def test_read_all(self, client, kasir_headers):
        notification_service.publish("SYSTEM", "A", "a")
        notification_service.publish("SYSTEM", "B", "b")

        resp = client.post("/api/notifications/read-all", headers=kasir_headers)
        assert resp.get_json() == {"updated": 2}

        resp = client.get("/api/notifications/unread-count", headers=kasir_headers)
        assert resp.get_json() == {"unread_count": 0}

    def test_delete(self, client, kasir_headers):
        notification = notification_service.publish("SYSTEM", "A", "a")

        resp = client.delete(f"/api/notifications/{notification.id}", headers=kasir_headers)
        assert resp.status_code == 200

        resp = client.delete(f"/api/notifications/{notification.id}", headers=kasir_headers)
        assert resp.status_code == 404

    def test_delete_someone_elses_is_403(self, client, owner, kasir_headers):
        private = notification_service.publish("SYSTEM", "Mine", "for owner", user_id=owner.id)

        resp = client.delete(f"/api/notifications/{private.id}", headers=kasir_headers)

        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Cannot delete another user's notification"

    def test_delete_requires_auth(self, client, db_session):
        assert client.delete("/api/notifications/1").status_code == 401

    def test_stream_requires_token(self, client, db_session):
        assert client.get("/api/notifications/stream").status_code == 401
        assert client.get("/api/notifications/stream?token=bogus").status_code == 401

    def test_stream_opens_with_query_token(self, client, kasir):
        _, token = session_service.create_session(kasir.id)
        resp = client.get(f"/api/notifications/stream?token={token}", buffered=False)

        assert resp.status_code == 200
        assert resp.mimetype == "text/event-stream"
        assert next(resp.response) == b":connected\n\n"
        resp.close()
