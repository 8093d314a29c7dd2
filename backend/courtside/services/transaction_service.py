# Overview: Transaction engine: POS/rental checkout, cancel, complete and pay.

"""
Every mutating entry point runs as one unit of work (run_atomic): catalog
rows are locked, stock is checked and decremented, the invoice number is
allocated and the transaction with its lines and sell/rent records is
written, or none of it is. Notifications go out only after the commit.
"""

from __future__ import annotations

from datetime import date, datetime

from flask import current_app

from ..errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import (
    Menu,
    Product,
    ProductRentRecord,
    ProductSellRecord,
    Table,
    Transaction,
    TransactionItem,
)
from ..models.catalog import PRODUCT_TYPE_RENT, PRODUCT_TYPE_SELL
from ..models.ledger import (
    ITEM_MENU,
    ITEM_PRODUCT,
    RENT_ACTIVE,
    RENT_CANCELLED,
    RENT_RETURNED,
    SELL_CANCELLED,
    SELL_ACTIVE,
    TX_CANCELLED,
    TX_COMPLETED,
    TX_PAID,
    TX_TYPE_POS,
    TX_TYPE_RENTAL,
    VALID_PAYMENT_METHODS,
)
from ..models.notifications import NOTIFY_TRANSACTION
from ..money import format_amount
from ..time_utils import day_bounds, utcnow
from ..validation import coerce_datetime, coerce_int
from . import notification_service
from .concurrency import lock_for_update, run_atomic
from .pagination import paginate
from .sequence_service import next_invoice_number
from .venue_service import occupy_table, release_table

CHECKOUT_TYPES = (TX_TYPE_POS, TX_TYPE_RENTAL)
CHECKOUT_ITEM_TYPES = (ITEM_PRODUCT, ITEM_MENU)


def _normalize_items(items) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("At least one item is required")

    normalized = []
    for index, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        item_type = raw.get("item_type")
        if item_type not in CHECKOUT_ITEM_TYPES:
            raise ValidationError(f"items[{index}].item_type must be one of {', '.join(CHECKOUT_ITEM_TYPES)}")
        if raw.get("id") is None:
            raise ValidationError(f"items[{index}].id is required")
        quantity = coerce_int(f"items[{index}].quantity", raw.get("quantity"))
        if quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be > 0")
        expected = raw.get("expected_return_at")
        normalized.append({
            "item_type": item_type,
            "id": coerce_int(f"items[{index}].id", raw["id"]),
            "quantity": quantity,
            "expected_return_at": coerce_datetime("expected_return_at", expected) if expected else None,
            "notes": raw.get("notes"),
        })
    return normalized


def _take_stock(record, quantity: int) -> None:
    if record.stock < quantity:
        raise ConflictError(
            f"Insufficient stock for {record.name}",
            {"item": record.name, "requested": quantity, "available": record.stock},
        )
    record.stock -= quantity


def restore_item_stock(item: TransactionItem) -> None:
    """Give back what checkout took for this line (no-op when nothing was taken)."""
    if not item.stock_deducted:
        return
    if item.product_id is not None:
        product = lock_for_update(db.session.query(Product).filter_by(id=item.product_id)).first()
        if product:
            product.stock += item.quantity
    elif item.menu_id is not None:
        menu = lock_for_update(db.session.query(Menu).filter_by(id=item.menu_id)).first()
        if menu and menu.stock is not None:
            menu.stock += item.quantity


def _lock_transaction(transaction_id: int) -> Transaction:
    tx = lock_for_update(db.session.query(Transaction).filter_by(id=transaction_id)).first()
    if not tx:
        raise NotFoundError("Transaction not found", {"id": transaction_id})
    return tx


def _release_linked_table(tx: Transaction) -> None:
    if tx.table_id:
        table = lock_for_update(db.session.query(Table).filter_by(id=tx.table_id)).first()
        if table:
            release_table(table)


def _notify_created(tx: Transaction, item_types: set[str]) -> None:
    if tx.type == TX_TYPE_RENTAL:
        title, action = "New Product Rental", "rented equipment"
    elif ITEM_MENU in item_types:
        title, action = "New Menu Order", "ordered from the menu"
    else:
        title, action = "New Product Sale", "bought products"

    notification_service.publish(
        NOTIFY_TRANSACTION,
        title,
        f"{tx.customer_name or 'Customer'} {action} for {format_amount(tx.total_amount_cents)}",
        data={
            "transaction_id": tx.id,
            "invoice_number": tx.invoice_number,
            "customer_name": tx.customer_name,
            "total_amount": format_amount(tx.total_amount_cents),
            "type": tx.type,
        },
    )


def create_transaction(
    *,
    tx_type: str,
    items: list[dict],
    payment_method: str,
    paid_amount_cents: int,
    user_id: int | None = None,
    table_id: int | None = None,
    customer_name: str | None = None,
    deposit_amount_cents: int | None = None,
    notes: str | None = None,
) -> Transaction:
    """
    Checkout a POS or RENTAL transaction.

    Stock rule: SELL products always take stock; RENT products take stock
    when the transaction is a RENTAL; menus take stock only when tracked.
    Raises ConflictError on short stock or short payment, in which case
    nothing is written.
    """
    if tx_type not in CHECKOUT_TYPES:
        raise ValidationError(f"type must be one of {', '.join(CHECKOUT_TYPES)}")
    if payment_method not in VALID_PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of {', '.join(VALID_PAYMENT_METHODS)}")
    if paid_amount_cents is None or paid_amount_cents < 0:
        raise ValidationError("paid_amount_cents must be >= 0")
    if deposit_amount_cents is not None and deposit_amount_cents < 0:
        raise ValidationError("deposit_amount_cents must be >= 0")
    lines = _normalize_items(items)
    customer_name = customer_name.strip() if customer_name else None

    def _op():
        table = None
        if table_id is not None:
            table = lock_for_update(db.session.query(Table).filter_by(id=table_id)).first()
            if not table:
                raise NotFoundError("Table not found", {"id": table_id})
            if not table.is_active:
                raise InvalidStateError("Table is not active", {"id": table_id})

        now = utcnow()
        total = 0
        priced: list[tuple[dict, TransactionItem, Product | None]] = []

        for line in lines:
            quantity = line["quantity"]
            if line["item_type"] == ITEM_PRODUCT:
                product = lock_for_update(db.session.query(Product).filter_by(id=line["id"])).first()
                if not product:
                    raise NotFoundError("Product not found", {"id": line["id"]})
                if not product.is_active:
                    raise InvalidStateError(f"Product {product.name} is not active", {"id": product.id})

                deducts = product.type == PRODUCT_TYPE_SELL or tx_type == TX_TYPE_RENTAL
                if deducts:
                    _take_stock(product, quantity)

                subtotal = product.price_cents * quantity
                item = TransactionItem(
                    item_type=ITEM_PRODUCT,
                    product_id=product.id,
                    quantity=quantity,
                    unit_price_cents=product.price_cents,
                    subtotal_cents=subtotal,
                    stock_deducted=deducts,
                    expected_return_at=line["expected_return_at"],
                    notes=line["notes"],
                )
                priced.append((line, item, product))
            else:
                menu = lock_for_update(db.session.query(Menu).filter_by(id=line["id"])).first()
                if not menu:
                    raise NotFoundError("Menu not found", {"id": line["id"]})
                if not menu.is_active:
                    raise InvalidStateError(f"Menu {menu.name} is not active", {"id": menu.id})

                if menu.tracks_stock:
                    _take_stock(menu, quantity)

                subtotal = menu.price_cents * quantity
                item = TransactionItem(
                    item_type=ITEM_MENU,
                    menu_id=menu.id,
                    quantity=quantity,
                    unit_price_cents=menu.price_cents,
                    subtotal_cents=subtotal,
                    stock_deducted=menu.tracks_stock,
                    notes=line["notes"],
                )
                priced.append((line, item, None))
            total += subtotal

        change = paid_amount_cents - total
        if change < 0:
            raise ConflictError(
                "Insufficient payment",
                {"total_amount_cents": total, "paid_amount_cents": paid_amount_cents},
            )

        tx = Transaction(
            invoice_number=next_invoice_number(),
            type=tx_type,
            table_id=table.id if table else None,
            customer_name=customer_name,
            total_amount_cents=total,
            paid_amount_cents=paid_amount_cents,
            change_amount_cents=change,
            deposit_amount_cents=deposit_amount_cents,
            payment_method=payment_method,
            status=TX_PAID,
            notes=notes,
            created_by_user_id=user_id,
        )
        db.session.add(tx)
        db.session.flush()

        for line, item, product in priced:
            item.transaction_id = tx.id
            db.session.add(item)
            db.session.flush()

            if product is None:
                continue
            if product.type == PRODUCT_TYPE_SELL:
                db.session.add(ProductSellRecord(
                    transaction_id=tx.id,
                    transaction_item_id=item.id,
                    product_id=product.id,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    subtotal_cents=item.subtotal_cents,
                    status=SELL_ACTIVE,
                    sold_at=now,
                ))
            elif product.type == PRODUCT_TYPE_RENT:
                db.session.add(ProductRentRecord(
                    transaction_id=tx.id,
                    transaction_item_id=item.id,
                    product_id=product.id,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    subtotal_cents=item.subtotal_cents,
                    status=RENT_ACTIVE,
                    rented_at=now,
                    expected_return_at=line["expected_return_at"],
                    notes=line["notes"],
                ))

        if table:
            occupy_table(table, customer_name)

        return tx

    tx = run_atomic(_op)
    current_app.logger.info("Transaction %s created (%s, total=%s)", tx.invoice_number, tx.type, tx.total_amount_cents)
    _notify_created(tx, {line["item_type"] for line in lines})
    return tx


def cancel_transaction(transaction_id: int) -> Transaction:
    """
    Cancel and restore everything checkout took.

    Lines whose rent record was already returned were restored at return
    time and are skipped here.
    """
    def _op():
        tx = _lock_transaction(transaction_id)
        if tx.status == TX_CANCELLED:
            raise InvalidStateError("Transaction already cancelled")

        returned_item_ids = {
            r.transaction_item_id
            for r in db.session.query(ProductRentRecord).filter_by(transaction_id=tx.id, status=RENT_RETURNED)
        }
        for item in tx.items:
            if item.id in returned_item_ids:
                continue
            restore_item_stock(item)

        db.session.query(ProductSellRecord).filter_by(transaction_id=tx.id).update(
            {ProductSellRecord.status: SELL_CANCELLED}, synchronize_session="fetch"
        )
        for record in db.session.query(ProductRentRecord).filter_by(transaction_id=tx.id, status=RENT_ACTIVE):
            record.status = RENT_CANCELLED

        tx.status = TX_CANCELLED
        _release_linked_table(tx)
        return tx

    tx = run_atomic(_op)
    current_app.logger.info("Transaction %s cancelled", tx.invoice_number)
    return tx


def complete_transaction(transaction_id: int) -> Transaction:
    """Close a RENTAL: rented products come back, sold products do not."""
    def _op():
        tx = _lock_transaction(transaction_id)
        if tx.type != TX_TYPE_RENTAL:
            raise InvalidStateError("Only RENTAL transactions can be completed")
        if tx.status == TX_COMPLETED:
            raise InvalidStateError("Transaction already completed")
        if tx.status == TX_CANCELLED:
            raise InvalidStateError("Cannot complete a cancelled transaction")

        now = utcnow()
        items_by_id = {item.id: item for item in tx.items}
        for record in db.session.query(ProductRentRecord).filter_by(transaction_id=tx.id, status=RENT_ACTIVE):
            item = items_by_id.get(record.transaction_item_id)
            if item is not None:
                restore_item_stock(item)
            record.status = RENT_RETURNED
            record.returned_at = now

        tx.status = TX_COMPLETED
        _release_linked_table(tx)
        return tx

    tx = run_atomic(_op)
    current_app.logger.info("Transaction %s completed", tx.invoice_number)
    return tx


def pay_transaction(transaction_id: int, *, payment_method: str, paid_amount_cents: int) -> Transaction:
    """Settle a PENDING transaction (booking or served order)."""
    if payment_method not in VALID_PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of {', '.join(VALID_PAYMENT_METHODS)}")
    if paid_amount_cents is None or paid_amount_cents < 0:
        raise ValidationError("paid_amount_cents must be >= 0")

    def _op():
        tx = _lock_transaction(transaction_id)
        if tx.status in (TX_PAID, TX_COMPLETED):
            raise InvalidStateError("Transaction already paid")
        if tx.status == TX_CANCELLED:
            raise InvalidStateError("Cannot pay a cancelled transaction")
        if paid_amount_cents < tx.total_amount_cents:
            raise ConflictError(
                "Insufficient payment",
                {"total_amount_cents": tx.total_amount_cents, "paid_amount_cents": paid_amount_cents},
            )

        tx.payment_method = payment_method
        tx.paid_amount_cents = paid_amount_cents
        tx.change_amount_cents = paid_amount_cents - tx.total_amount_cents
        tx.status = TX_PAID
        return tx

    return run_atomic(_op)


def get_transaction(transaction_id: int) -> Transaction:
    tx = db.session.get(Transaction, transaction_id)
    if not tx:
        raise NotFoundError("Transaction not found", {"id": transaction_id})
    return tx


def list_transactions(
    *,
    tx_type: str | None = None,
    status: str | None = None,
    table_id: int | None = None,
    on_date: date | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Transaction], int]:
    query = db.session.query(Transaction)
    if tx_type:
        query = query.filter(Transaction.type == tx_type)
    if status:
        query = query.filter(Transaction.status == status)
    if table_id:
        query = query.filter(Transaction.table_id == table_id)
    if on_date:
        start, end = day_bounds(on_date)
    if start:
        query = query.filter(Transaction.created_at >= start)
    if end:
        query = query.filter(Transaction.created_at < end)
    return paginate(query.order_by(Transaction.created_at.desc(), Transaction.id.desc()), page, limit)
