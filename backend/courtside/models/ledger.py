from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

TX_TYPE_POS = "POS"
TX_TYPE_RENTAL = "RENTAL"
TX_TYPE_BOOKING = "BOOKING"
VALID_TX_TYPES = (TX_TYPE_POS, TX_TYPE_RENTAL, TX_TYPE_BOOKING)

TX_PENDING = "PENDING"
TX_PAID = "PAID"
TX_CANCELLED = "CANCELLED"
TX_COMPLETED = "COMPLETED"
VALID_TX_STATUSES = (TX_PENDING, TX_PAID, TX_CANCELLED, TX_COMPLETED)

# Statuses that count as realised revenue
REVENUE_STATUSES = (TX_PAID, TX_COMPLETED)

PAYMENT_CASH = "CASH"
PAYMENT_QRIS = "QRIS"
PAYMENT_TRANSFER = "TRANSFER"
PAYMENT_OTHER = "OTHER"
VALID_PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_QRIS, PAYMENT_TRANSFER, PAYMENT_OTHER)

ITEM_PRODUCT = "PRODUCT"
ITEM_MENU = "MENU"
ITEM_BOOKING = "BOOKING"
VALID_ITEM_TYPES = (ITEM_PRODUCT, ITEM_MENU, ITEM_BOOKING)

SELL_ACTIVE = "ACTIVE"
SELL_CANCELLED = "CANCELLED"

RENT_ACTIVE = "ACTIVE"
RENT_RETURNED = "RETURNED"
RENT_CANCELLED = "CANCELLED"
VALID_RENT_STATUSES = (RENT_ACTIVE, RENT_RETURNED, RENT_CANCELLED)


class Transaction(db.Model):
    """
    Financial transaction (invoice).

    The transaction, its items and its sell/rent records are created in one
    unit and only ever mutated together by transaction_service.
    Amounts are integer cents; change_amount_cents = paid - total and is never negative.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("change_amount_cents >= 0", name="ck_transactions_change_non_negative"),
        db.Index("ix_transactions_status_created", "status", "created_at"),
        db.Index("ix_transactions_type_created", "type", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable invoice number (e.g., "INV-20240115-0001")
    invoice_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    type = db.Column(db.String(16), nullable=False)  # POS, RENTAL, BOOKING
    table_id = db.Column(db.Integer, db.ForeignKey("tables.id"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=True)

    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    paid_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    change_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    deposit_amount_cents = db.Column(db.Integer, nullable=True)

    payment_method = db.Column(db.String(16), nullable=False, default=PAYMENT_CASH)
    status = db.Column(db.String(16), nullable=False, default=TX_PENDING, index=True)
    notes = db.Column(db.Text, nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    table = db.relationship("Table")
    created_by = db.relationship("User")
    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        lazy=True,
        order_by="TransactionItem.id",
    )
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} invoice={self.invoice_number} status={self.status}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "type": self.type,
            "table_id": self.table_id,
            "customer_name": self.customer_name,
            "total_amount_cents": self.total_amount_cents,
            "paid_amount_cents": self.paid_amount_cents,
            "change_amount_cents": self.change_amount_cents,
            "deposit_amount_cents": self.deposit_amount_cents,
            "payment_method": self.payment_method,
            "status": self.status,
            "notes": self.notes,
            "created_by_user_id": self.created_by_user_id,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class TransactionItem(db.Model):
    """Priced line; unit price is a snapshot of the catalog price at checkout."""
    __tablename__ = "transaction_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)

    item_type = db.Column(db.String(16), nullable=False)  # PRODUCT, MENU, BOOKING
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    menu_id = db.Column(db.Integer, db.ForeignKey("menus.id"), nullable=True, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    subtotal_cents = db.Column(db.Integer, nullable=False)

    # True when checkout decremented catalog stock for this line; restores key off it
    stock_deducted = db.Column(db.Boolean, nullable=False, default=False)

    expected_return_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    product = db.relationship("Product")
    menu = db.relationship("Menu")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "item_type": self.item_type,
            "product_id": self.product_id,
            "menu_id": self.menu_id,
            "name": self.product.name if self.product else (self.menu.name if self.menu else None),
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "subtotal_cents": self.subtotal_cents,
            "stock_deducted": self.stock_deducted,
            "expected_return_at": to_utc_z(self.expected_return_at),
            "notes": self.notes,
        }


class ProductSellRecord(db.Model):
    """One row per SELL product line."""
    __tablename__ = "product_sell_records"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)
    transaction_item_id = db.Column(db.Integer, db.ForeignKey("transaction_items.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    subtotal_cents = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=SELL_ACTIVE, index=True)
    sold_at = db.Column(db.DateTime, nullable=False)

    transaction = db.relationship("Transaction")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "invoice_number": self.transaction.invoice_number if self.transaction else None,
            "transaction_item_id": self.transaction_item_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "subtotal_cents": self.subtotal_cents,
            "status": self.status,
            "sold_at": to_utc_z(self.sold_at),
        }


class ProductRentRecord(db.Model):
    """
    One row per RENT product line.

    ACTIVE -> RETURNED happens once and restores stock at that moment;
    ACTIVE -> CANCELLED happens with the owning transaction's cancellation.
    """
    __tablename__ = "product_rent_records"
    __table_args__ = (
        db.Index("ix_rent_records_status_expected", "status", "expected_return_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)
    transaction_item_id = db.Column(db.Integer, db.ForeignKey("transaction_items.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    subtotal_cents = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=RENT_ACTIVE)

    rented_at = db.Column(db.DateTime, nullable=False)
    expected_return_at = db.Column(db.DateTime, nullable=True)
    returned_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    transaction = db.relationship("Transaction")
    product = db.relationship("Product")
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "invoice_number": self.transaction.invoice_number if self.transaction else None,
            "customer_name": self.transaction.customer_name if self.transaction else None,
            "transaction_item_id": self.transaction_item_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "subtotal_cents": self.subtotal_cents,
            "status": self.status,
            "rented_at": to_utc_z(self.rented_at),
            "expected_return_at": to_utc_z(self.expected_return_at),
            "returned_at": to_utc_z(self.returned_at),
            "notes": self.notes,
        }


class DocumentSequence(db.Model):
    """
    Per-day counter for human-readable document numbers.

    next_number is bumped with a single UPDATE inside the caller's unit,
    so two concurrent checkouts can never read the same value.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("document_type", "period", name="uq_document_sequences_type_period"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    document_type = db.Column(db.String(32), nullable=False)  # INVOICE, BOOKING
    period = db.Column(db.String(8), nullable=False)  # YYYYMMDD
    next_number = db.Column(db.Integer, nullable=False, default=1)
