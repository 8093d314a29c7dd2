"""
Guest order-request tests.

Verifies:
- Orders are priced from the guest cart and checked for internal consistency
- The status machine rejects illegal transitions without side effects
- SERVED opens a PENDING POS transaction and takes tracked menu stock
"""

import re

import pytest

from courtside.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from courtside.models import Notification, OrderRequest, Transaction
from courtside.services import order_request_service, transaction_service, venue_service


def _line(menu, quantity=1, unit_price=None):
    price = menu.price_cents if unit_price is None else unit_price
    return {"menu_id": menu.id, "quantity": quantity, "unit_price_cents": price, "subtotal_cents": price * quantity}


def _order(table, items, customer_name="Dewi"):
    return order_request_service.create_order_request(
        table_code=table.code,
        customer_name=customer_name,
        items=items,
    )


def _advance(order, *statuses, actor=None):
    for status in statuses:
        order = order_request_service.update_status(order.id, status, actor_user_id=actor)
    return order


# =============================================================================
# CREATE
# =============================================================================


class TestCreateOrderRequest:

    def test_creates_pending_order(self, db_session, table, menu, tracked_menu):
        order = _order(table, [_line(menu, 2), _line(tracked_menu, 1)])

        assert order.status == "PENDING"
        assert order.table_id == table.id
        assert order.total_amount_cents == 7000000
        assert re.match(r"^ORD-\d{8}-[A-Z0-9]{4}$", order.order_number)
        assert [i.quantity for i in order.items] == [2, 1]
        assert order.transaction_id is None

    def test_guest_price_is_kept(self, db_session, table, menu):
        order = _order(table, [_line(menu, 2, unit_price=2000000)])
        assert order.total_amount_cents == 4000000

    def test_notifies_staff(self, db_session, table, menu):
        order = _order(table, [_line(menu)])

        notification = db_session.query(Notification).filter_by(order_request_id=order.id).one()
        assert notification.type == "ORDER_REQUEST"
        assert notification.title == "New Order Request"
        assert notification.user_id is None

    def test_unknown_table_code(self, db_session, menu):
        with pytest.raises(NotFoundError, match="Invalid table code"):
            order_request_service.create_order_request(
                table_code="NOPE", customer_name="Dewi", items=[_line(menu)]
            )

    def test_inactive_table_rejected(self, db_session, table, menu):
        venue_service.set_table_active(table.id, False)
        with pytest.raises(NotFoundError):
            _order(table, [_line(menu)])

    def test_subtotal_mismatch_rejected(self, db_session, table, menu):
        bad = _line(menu, 2)
        bad["subtotal_cents"] += 1
        with pytest.raises(ValidationError) as exc:
            _order(table, [bad])
        assert exc.value.details == {"expected": 5000000, "received": 5000001}

    def test_missing_menu_rejected(self, db_session, table, menu):
        ghost = {"menu_id": 999999, "quantity": 1, "unit_price_cents": 100, "subtotal_cents": 100}
        with pytest.raises(NotFoundError) as exc:
            _order(table, [_line(menu), ghost])
        assert exc.value.details == {"menu_ids": [999999]}
        assert db_session.query(OrderRequest).count() == 0

    @pytest.mark.parametrize("items", [None, [], ["latte"]])
    def test_items_required(self, db_session, table, items):
        with pytest.raises(ValidationError):
            _order(table, items)

    def test_customer_name_required(self, db_session, table, menu):
        with pytest.raises(ValidationError):
            _order(table, [_line(menu)], customer_name="   ")


# =============================================================================
# STATUS MACHINE
# =============================================================================


class TestOrderStatusMachine:

    @pytest.mark.parametrize(
        "current,new,allowed",
        [
            ("PENDING", "APPROVED", True),
            ("PENDING", "REJECTED", True),
            ("PENDING", "CANCELLED", True),
            ("PENDING", "PREPARING", False),
            ("PENDING", "SERVED", False),
            ("APPROVED", "PREPARING", True),
            ("APPROVED", "CANCELLED", True),
            ("APPROVED", "REJECTED", False),
            ("PREPARING", "SERVED", True),
            ("PREPARING", "CANCELLED", True),
            ("PREPARING", "APPROVED", False),
            ("SERVED", "CANCELLED", False),
            ("REJECTED", "APPROVED", False),
            ("CANCELLED", "PENDING", False),
        ],
    )
    def test_can_transition(self, current, new, allowed):
        assert order_request_service.can_transition(current, new) is allowed

    def test_approve_records_actor(self, db_session, owner, table, menu):
        order = _advance(_order(table, [_line(menu)]), "APPROVED", actor=owner.id)

        assert order.status == "APPROVED"
        assert order.approved_by_user_id == owner.id
        assert order.approved_at is not None

    def test_illegal_transition_leaves_order_untouched(self, db_session, table, menu):
        order = _order(table, [_line(menu)])

        with pytest.raises(InvalidStateError) as exc:
            order_request_service.update_status(order.id, "SERVED")

        assert exc.value.details == {"from": "PENDING", "to": "SERVED"}
        assert order.status == "PENDING"
        assert db_session.query(Transaction).count() == 0

    def test_reject_stores_reason(self, db_session, table, menu):
        order = _order(table, [_line(menu)])
        order = order_request_service.update_status(order.id, "REJECTED", rejected_reason="Out of stock")

        assert order.status == "REJECTED"
        assert order.rejected_reason == "Out of stock"
        for target in ("APPROVED", "SERVED"):
            with pytest.raises(InvalidStateError):
                order_request_service.update_status(order.id, target)

        assert order.status == "REJECTED"
        assert order.transaction_id is None
        assert db_session.query(Transaction).count() == 0

    def test_unknown_status(self, db_session, table, menu):
        order = _order(table, [_line(menu)])
        with pytest.raises(ValidationError):
            order_request_service.update_status(order.id, "EATEN")

    def test_unknown_order(self, db_session):
        with pytest.raises(NotFoundError):
            order_request_service.update_status(424242, "APPROVED")


# =============================================================================
# SERVED -> TRANSACTION
# =============================================================================


class TestServeOrder:

    def test_served_opens_pending_pos_transaction(self, db_session, kasir, table, menu, tracked_menu):
        order = _order(table, [_line(menu, 2), _line(tracked_menu, 2)])

        order = _advance(order, "APPROVED", "PREPARING", "SERVED", actor=kasir.id)

        assert order.status == "SERVED"
        tx = db_session.get(Transaction, order.transaction_id)
        assert tx.type == "POS"
        assert tx.status == "PENDING"
        assert tx.table_id == table.id
        assert tx.customer_name == "Dewi"
        assert tx.total_amount_cents == 9000000
        assert tx.paid_amount_cents == 0
        assert tx.created_by_user_id == kasir.id
        assert [(i.item_type, i.menu_id, i.quantity) for i in tx.items] == [
            ("MENU", menu.id, 2),
            ("MENU", tracked_menu.id, 2),
        ]
        assert tracked_menu.stock == 1
        assert menu.stock is None

    def test_served_transaction_can_be_paid(self, db_session, table, menu):
        order = _advance(_order(table, [_line(menu)]), "APPROVED", "PREPARING", "SERVED")

        tx = transaction_service.pay_transaction(
            order.transaction_id, payment_method="QRIS", paid_amount_cents=2500000
        )
        assert tx.status == "PAID"

    def test_cancel_served_transaction_restores_menu_stock(self, db_session, table, tracked_menu):
        order = _advance(_order(table, [_line(tracked_menu, 3)]), "APPROVED", "PREPARING", "SERVED")
        assert tracked_menu.stock == 0

        transaction_service.cancel_transaction(order.transaction_id)
        assert tracked_menu.stock == 3

    def test_served_with_short_stock_stays_preparing(self, db_session, table, tracked_menu):
        order = _advance(_order(table, [_line(tracked_menu, 4)]), "APPROVED", "PREPARING")

        with pytest.raises(ConflictError, match="Insufficient stock"):
            order_request_service.update_status(order.id, "SERVED")

        assert order.status == "PREPARING"
        assert order.transaction_id is None
        assert tracked_menu.stock == 3
        assert db_session.query(Transaction).count() == 0


# =============================================================================
# HTTP
# =============================================================================


class TestOrderRequestRoutes:

    def test_validate_table_code(self, client, table):
        resp = client.get(f"/api/order-requests/validate-table/{table.code}")
        assert resp.status_code == 200
        assert resp.get_json()["valid"] is True
        assert resp.get_json()["table"]["code"] == "T01"

        resp = client.get("/api/order-requests/validate-table/XX99")
        assert resp.get_json() == {"valid": False, "table": None}

    def test_guest_can_order(self, client, table, menu):
        resp = client.post("/api/order-requests", json={
            "table_code": table.code,
            "customer_name": "Dewi",
            "items": [_line(menu, 2)],
        })

        assert resp.status_code == 201
        body = resp.get_json()["order_request"]
        assert body["status"] == "PENDING"
        assert body["table_code"] == "T01"
        assert body["items"][0]["menu_name"] == "Iced Latte"

    def test_list_requires_staff(self, client, table, menu):
        _order(table, [_line(menu)])
        assert client.get("/api/order-requests").status_code == 401

    def test_kasir_moves_order_along(self, client, kasir_headers, table, menu):
        order = _order(table, [_line(menu)])

        resp = client.patch(f"/api/order-requests/{order.id}/status", json={"status": "APPROVED"}, headers=kasir_headers)
        assert resp.status_code == 200
        assert resp.get_json()["order_request"]["status"] == "APPROVED"

        resp = client.patch(f"/api/order-requests/{order.id}/status", json={"status": "SERVED"}, headers=kasir_headers)
        assert resp.status_code == 400

    def test_list_filters_by_status(self, client, kasir_headers, table, menu):
        first = _order(table, [_line(menu)])
        _order(table, [_line(menu)])
        order_request_service.update_status(first.id, "APPROVED")

        resp = client.get("/api/order-requests?status=PENDING", headers=kasir_headers)
        body = resp.get_json()
        assert body["pagination"]["total"] == 1
        assert body["order_requests"][0]["status"] == "PENDING"
