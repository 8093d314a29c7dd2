# Overview: Guest order-request workflow and its SERVED materialization.

"""
Order requests move through a closed state machine:

    PENDING   -> APPROVED | REJECTED | CANCELLED
    APPROVED  -> PREPARING | CANCELLED
    PREPARING -> SERVED | CANCELLED

SERVED, REJECTED and CANCELLED are terminal. Reaching SERVED turns the
order into a PENDING POS transaction (settled later through pay) and takes
tracked menu stock, all in one unit.
"""

from __future__ import annotations

import secrets
import string

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Menu, OrderRequest, OrderRequestItem, Transaction, TransactionItem
from ..models.ledger import ITEM_MENU, PAYMENT_OTHER, TX_PENDING, TX_TYPE_POS
from ..models.notifications import NOTIFY_ORDER_REQUEST
from ..models.orders import (
    ORDER_APPROVED,
    ORDER_CANCELLED,
    ORDER_PENDING,
    ORDER_PREPARING,
    ORDER_REJECTED,
    ORDER_SERVED,
    VALID_ORDER_STATUSES,
)
from ..money import format_amount
from ..time_utils import utcnow
from ..validation import coerce_int
from . import notification_service
from .concurrency import lock_for_update, run_atomic
from .pagination import paginate
from .sequence_service import next_invoice_number
from .venue_service import validate_table_code

ORDER_TRANSITIONS: dict[str, frozenset[str]] = {
    ORDER_PENDING: frozenset({ORDER_APPROVED, ORDER_REJECTED, ORDER_CANCELLED}),
    ORDER_APPROVED: frozenset({ORDER_PREPARING, ORDER_CANCELLED}),
    ORDER_PREPARING: frozenset({ORDER_SERVED, ORDER_CANCELLED}),
    ORDER_SERVED: frozenset(),
    ORDER_REJECTED: frozenset(),
    ORDER_CANCELLED: frozenset(),
}

ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_ATTEMPTS = 5

STATUS_TITLES = {
    ORDER_APPROVED: "Order Approved",
    ORDER_PREPARING: "Order Being Prepared",
    ORDER_SERVED: "Order Served",
    ORDER_REJECTED: "Order Rejected",
    ORDER_CANCELLED: "Order Cancelled",
}


def can_transition(current: str, new: str) -> bool:
    return new in ORDER_TRANSITIONS.get(current, frozenset())


def generate_order_number() -> str:
    suffix = "".join(secrets.choice(ORDER_SUFFIX_ALPHABET) for _ in range(4))
    return f"ORD-{utcnow():%Y%m%d}-{suffix}"


def _normalize_items(items) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("At least one item is required")

    normalized = []
    for index, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        menu_id = coerce_int(f"items[{index}].menu_id", raw.get("menu_id"))
        quantity = coerce_int(f"items[{index}].quantity", raw.get("quantity"))
        unit_price = coerce_int(f"items[{index}].unit_price_cents", raw.get("unit_price_cents"))
        subtotal = coerce_int(f"items[{index}].subtotal_cents", raw.get("subtotal_cents"))
        if quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be > 0")
        if unit_price < 0:
            raise ValidationError(f"items[{index}].unit_price_cents must be >= 0")
        if subtotal != unit_price * quantity:
            raise ValidationError(
                f"items[{index}].subtotal_cents must equal unit_price_cents x quantity",
                {"expected": unit_price * quantity, "received": subtotal},
            )
        normalized.append({
            "menu_id": menu_id,
            "quantity": quantity,
            "unit_price_cents": unit_price,
            "subtotal_cents": subtotal,
            "notes": raw.get("notes"),
        })
    return normalized


def create_order_request(
    *,
    table_code: str,
    customer_name: str,
    items: list[dict],
    notes: str | None = None,
) -> OrderRequest:
    """
    Place a guest order against a table code.

    Line prices come from the guest's cart as displayed; the order is priced
    from them and only internal consistency (subtotal = price x qty) is checked.
    """
    if not customer_name or not customer_name.strip():
        raise ValidationError("customer_name is required")
    lines = _normalize_items(items)

    valid, table = validate_table_code(table_code)
    if not valid:
        raise NotFoundError("Invalid table code", {"table_code": table_code})

    menu_ids = {line["menu_id"] for line in lines}
    found = {m.id for m in db.session.query(Menu.id).filter(Menu.id.in_(menu_ids))}
    missing = sorted(menu_ids - found)
    if missing:
        raise NotFoundError("Menu items not found", {"menu_ids": missing})

    total = sum(line["subtotal_cents"] for line in lines)

    def _op():
        order = OrderRequest(
            order_number=generate_order_number(),
            table_id=table.id,
            customer_name=customer_name.strip(),
            total_amount_cents=total,
            status=ORDER_PENDING,
            notes=notes,
        )
        db.session.add(order)
        db.session.flush()
        for line in lines:
            db.session.add(OrderRequestItem(order_request_id=order.id, **line))
        return order

    order = None
    for attempt in range(ORDER_NUMBER_ATTEMPTS):
        try:
            order = run_atomic(_op)
            break
        except IntegrityError:
            # random suffix collided with an existing order number
            if attempt >= ORDER_NUMBER_ATTEMPTS - 1:
                raise

    notification_service.publish(
        NOTIFY_ORDER_REQUEST,
        "New Order Request",
        f"{order.customer_name} ({table.name}) placed an order for {format_amount(order.total_amount_cents)}",
        data={
            "order_request_id": order.id,
            "order_number": order.order_number,
            "table_code": table.code,
            "total_amount": format_amount(order.total_amount_cents),
        },
        order_request_id=order.id,
    )
    return order


def _serve(order: OrderRequest, actor_user_id: int | None) -> Transaction:
    """Take tracked menu stock and open the POS transaction for a served order."""
    for item in order.items:
        menu = lock_for_update(db.session.query(Menu).filter_by(id=item.menu_id)).first()
        if menu is None or not menu.tracks_stock:
            continue
        if menu.stock < item.quantity:
            raise ConflictError(
                f"Insufficient stock for {menu.name}",
                {"item": menu.name, "requested": item.quantity, "available": menu.stock},
            )
        menu.stock -= item.quantity

    tx = Transaction(
        invoice_number=next_invoice_number(),
        type=TX_TYPE_POS,
        table_id=order.table_id,
        customer_name=order.customer_name,
        total_amount_cents=order.total_amount_cents,
        paid_amount_cents=0,
        change_amount_cents=0,
        payment_method=PAYMENT_OTHER,
        status=TX_PENDING,
        created_by_user_id=actor_user_id,
    )
    db.session.add(tx)
    db.session.flush()

    for item in order.items:
        menu = db.session.get(Menu, item.menu_id)
        db.session.add(TransactionItem(
            transaction_id=tx.id,
            item_type=ITEM_MENU,
            menu_id=item.menu_id,
            quantity=item.quantity,
            unit_price_cents=item.unit_price_cents,
            subtotal_cents=item.subtotal_cents,
            stock_deducted=bool(menu and menu.tracks_stock),
            notes=item.notes,
        ))
    return tx


def update_status(
    order_id: int,
    new_status: str,
    *,
    actor_user_id: int | None = None,
    rejected_reason: str | None = None,
) -> OrderRequest:
    """
    Apply one transition. Illegal transitions raise InvalidStateError and
    leave the order untouched.
    """
    if new_status not in VALID_ORDER_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(VALID_ORDER_STATUSES)}")

    def _op():
        order = lock_for_update(db.session.query(OrderRequest).filter_by(id=order_id)).first()
        if not order:
            raise NotFoundError("Order request not found", {"id": order_id})
        if not can_transition(order.status, new_status):
            raise InvalidStateError(
                f"Cannot transition from {order.status} to {new_status}",
                {"from": order.status, "to": new_status},
            )

        now = utcnow()
        if new_status == ORDER_APPROVED:
            order.approved_by_user_id = actor_user_id
            order.approved_at = now
        elif new_status == ORDER_REJECTED:
            order.rejected_reason = rejected_reason
        elif new_status == ORDER_SERVED:
            tx = _serve(order, actor_user_id)
            order.transaction_id = tx.id

        order.status = new_status
        order.updated_at = now
        return order

    order = run_atomic(_op)
    current_app.logger.info("Order request %s moved to %s", order.order_number, new_status)

    message = f"Order {order.order_number} is now {new_status}"
    if new_status == ORDER_REJECTED and rejected_reason:
        message = f"{message}: {rejected_reason}"
    notification_service.publish(
        NOTIFY_ORDER_REQUEST,
        STATUS_TITLES[new_status],
        message,
        data={
            "order_request_id": order.id,
            "order_number": order.order_number,
            "status": new_status,
            "transaction_id": order.transaction_id,
        },
        order_request_id=order.id,
    )
    return order


def get_order_request(order_id: int) -> OrderRequest:
    order = db.session.get(OrderRequest, order_id)
    if not order:
        raise NotFoundError("Order request not found", {"id": order_id})
    return order


def list_order_requests(
    *,
    status: str | None = None,
    table_id: int | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[OrderRequest], int]:
    query = db.session.query(OrderRequest)
    if status:
        query = query.filter(OrderRequest.status == status)
    if table_id:
        query = query.filter(OrderRequest.table_id == table_id)
    return paginate(query.order_by(OrderRequest.created_at.desc(), OrderRequest.id.desc()), page, limit)
