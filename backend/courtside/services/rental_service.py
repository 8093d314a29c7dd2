# Overview: Product rent/sell records: returns, listings and per-product stats.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, func

from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, ProductRentRecord, ProductSellRecord, TransactionItem
from ..models.ledger import RENT_ACTIVE, RENT_CANCELLED, RENT_RETURNED, SELL_ACTIVE, SELL_CANCELLED
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_atomic
from .pagination import paginate
from .transaction_service import restore_item_stock


def return_rent_record(record_id: int, returned_at: datetime | None = None) -> ProductRentRecord:
    """
    Return one rented line ahead of the whole transaction.

    ACTIVE -> RETURNED happens once; the product's stock comes back by the
    record's quantity in the same unit.
    """
    def _op():
        record = lock_for_update(db.session.query(ProductRentRecord).filter_by(id=record_id)).first()
        if not record:
            raise NotFoundError("Rent record not found", {"id": record_id})
        if record.status != RENT_ACTIVE:
            raise InvalidStateError(
                f"Cannot return a rent record with status {record.status}",
                {"status": record.status},
            )

        when = returned_at or utcnow()
        if when < record.rented_at:
            raise ValidationError("returned_at cannot be before rented_at")

        item = db.session.get(TransactionItem, record.transaction_item_id)
        if item is not None:
            restore_item_stock(item)

        record.status = RENT_RETURNED
        record.returned_at = when
        return record

    return run_atomic(_op)


def get_rent_record(record_id: int) -> ProductRentRecord:
    record = db.session.get(ProductRentRecord, record_id)
    if not record:
        raise NotFoundError("Rent record not found", {"id": record_id})
    return record


def list_rent_records(
    *,
    status: str | None = None,
    product_id: int | None = None,
    overdue_only: bool = False,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[ProductRentRecord], int]:
    query = db.session.query(ProductRentRecord)
    if status:
        query = query.filter(ProductRentRecord.status == status)
    if product_id:
        query = query.filter(ProductRentRecord.product_id == product_id)
    if overdue_only:
        query = query.filter(
            ProductRentRecord.status == RENT_ACTIVE,
            ProductRentRecord.expected_return_at.isnot(None),
            ProductRentRecord.expected_return_at < utcnow(),
        )
    return paginate(query.order_by(ProductRentRecord.rented_at.desc(), ProductRentRecord.id.desc()), page, limit)


def list_active_rentals() -> list[ProductRentRecord]:
    return (
        db.session.query(ProductRentRecord)
        .filter(ProductRentRecord.status == RENT_ACTIVE)
        .order_by(ProductRentRecord.expected_return_at.asc(), ProductRentRecord.id.asc())
        .all()
    )


def get_sell_record(record_id: int) -> ProductSellRecord:
    record = db.session.get(ProductSellRecord, record_id)
    if not record:
        raise NotFoundError("Sell record not found", {"id": record_id})
    return record


def list_sell_records(
    *,
    status: str | None = None,
    product_id: int | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[ProductSellRecord], int]:
    query = db.session.query(ProductSellRecord)
    if status:
        query = query.filter(ProductSellRecord.status == status)
    if product_id:
        query = query.filter(ProductSellRecord.product_id == product_id)
    return paginate(query.order_by(ProductSellRecord.sold_at.desc(), ProductSellRecord.id.desc()), page, limit)


def product_rent_stats() -> list[dict]:
    """Per rented product: active/returned quantities, rental count and revenue."""
    rows = (
        db.session.query(
            Product.id,
            Product.name,
            Product.stock,
            func.count(ProductRentRecord.id),
            func.sum(case((ProductRentRecord.status == RENT_ACTIVE, ProductRentRecord.quantity), else_=0)),
            func.sum(case((ProductRentRecord.status == RENT_RETURNED, ProductRentRecord.quantity), else_=0)),
            func.sum(case((ProductRentRecord.status != RENT_CANCELLED, ProductRentRecord.subtotal_cents), else_=0)),
        )
        .join(ProductRentRecord, ProductRentRecord.product_id == Product.id)
        .group_by(Product.id, Product.name, Product.stock)
        .order_by(Product.name.asc())
        .all()
    )
    return [
        {
            "product_id": pid,
            "product_name": name,
            "stock": stock,
            "rental_count": count,
            "active_quantity": int(active or 0),
            "returned_quantity": int(returned or 0),
            "revenue_cents": int(revenue or 0),
        }
        for pid, name, stock, count, active, returned, revenue in rows
    ]


def product_sell_stats() -> list[dict]:
    """Per sold product: sold/cancelled quantities, sale count and revenue."""
    rows = (
        db.session.query(
            Product.id,
            Product.name,
            func.count(ProductSellRecord.id),
            func.sum(case((ProductSellRecord.status == SELL_ACTIVE, ProductSellRecord.quantity), else_=0)),
            func.sum(case((ProductSellRecord.status == SELL_CANCELLED, ProductSellRecord.quantity), else_=0)),
            func.sum(case((ProductSellRecord.status == SELL_ACTIVE, ProductSellRecord.subtotal_cents), else_=0)),
        )
        .join(ProductSellRecord, ProductSellRecord.product_id == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(Product.name.asc())
        .all()
    )
    return [
        {
            "product_id": pid,
            "product_name": name,
            "sale_count": count,
            "sold_quantity": int(sold or 0),
            "cancelled_quantity": int(cancelled or 0),
            "revenue_cents": int(revenue or 0),
        }
        for pid, name, count, sold, cancelled, revenue in rows
    ]
