# Overview: Venue inventory and its append-only adjustment ledger.

"""
adjust_stock is the only path that changes Inventory.quantity. Each call
writes one InventoryAdjustment and the new quantity in the same unit, so
the latest adjustment's quantity_after always equals the live quantity.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_

from ..errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Inventory, InventoryAdjustment
from ..models.inventory import (
    CHANGE_ADD,
    CHANGE_CORRECTION,
    CHANGE_REMOVE,
    INVENTORY_DISPOSED,
    VALID_CHANGE_TYPES,
    VALID_CONDITIONS,
    VALID_INVENTORY_STATUSES,
    VALID_INVENTORY_TYPES,
)
from ..validation import ModelValidationPolicy, enforce_rules_inventory, validate_payload
from .concurrency import lock_for_update, run_atomic
from .pagination import paginate
from .slug_service import unique_slug

INITIAL_STOCK_REASON = "Initial stock"

INVENTORY_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "type", "quantity", "unit", "condition", "status",
        "owner_name", "purchase_date", "purchase_price_cents", "location", "notes",
    },
    required_on_create={"name", "type"},
    choices={
        "type": VALID_INVENTORY_TYPES,
        "condition": VALID_CONDITIONS,
        "status": VALID_INVENTORY_STATUSES,
    },
)


def _apply_change(before: int, change_type: str, amount: int) -> int:
    if change_type == CHANGE_ADD:
        return before + amount
    if change_type == CHANGE_REMOVE:
        return before - amount
    return amount  # CORRECTION sets the absolute count


def adjust_stock(
    inventory_id: int,
    *,
    change_type: str,
    amount: int,
    reason: str,
    actor_user_id: int | None = None,
) -> tuple[Inventory, InventoryAdjustment]:
    """
    Apply ADD / REMOVE / CORRECTION.

    Raises ConflictError when the result would be negative; quantity is
    left unchanged in that case.
    """
    if change_type not in VALID_CHANGE_TYPES:
        raise ValidationError(f"change_type must be one of {', '.join(VALID_CHANGE_TYPES)}")
    if amount is None or amount < 0 or (amount == 0 and change_type != CHANGE_CORRECTION):
        raise ValidationError("amount must be a positive integer")
    if not reason or not reason.strip():
        raise ValidationError("reason is required")

    def _op():
        inventory = lock_for_update(db.session.query(Inventory).filter_by(id=inventory_id)).first()
        if not inventory:
            raise NotFoundError("Inventory not found", {"id": inventory_id})
        if inventory.status == INVENTORY_DISPOSED:
            raise InvalidStateError("Cannot adjust a disposed inventory item")

        before = inventory.quantity
        after = _apply_change(before, change_type, amount)
        if after < 0:
            raise ConflictError(
                "Adjustment would make quantity negative",
                {"quantity_before": before, "change_type": change_type, "amount": amount},
            )

        adjustment = InventoryAdjustment(
            inventory_id=inventory.id,
            quantity_before=before,
            quantity_after=after,
            change_amount=after - before,
            change_type=change_type,
            reason=reason.strip(),
            created_by_user_id=actor_user_id,
        )
        db.session.add(adjustment)
        inventory.quantity = after
        return inventory, adjustment

    inventory, adjustment = run_atomic(_op)
    current_app.logger.info(
        "Inventory %s adjusted: %s %s -> %s", inventory.id, change_type, adjustment.quantity_before, adjustment.quantity_after
    )
    return inventory, adjustment


def create_inventory(payload: dict, *, actor_user_id: int | None = None) -> Inventory:
    """Create an item; a positive starting quantity is booked as the first ADD."""
    patch = validate_payload(model=Inventory, payload=payload, policy=INVENTORY_POLICY, partial=False)
    enforce_rules_inventory(patch)
    initial = patch.pop("quantity", None) or 0

    def _op():
        inventory = Inventory(**patch)
        inventory.quantity = initial
        inventory.slug = unique_slug(Inventory, patch["name"])
        db.session.add(inventory)
        db.session.flush()
        if initial > 0:
            db.session.add(InventoryAdjustment(
                inventory_id=inventory.id,
                quantity_before=0,
                quantity_after=initial,
                change_amount=initial,
                change_type=CHANGE_ADD,
                reason=INITIAL_STOCK_REASON,
                created_by_user_id=actor_user_id,
            ))
        return inventory

    return run_atomic(_op)


def update_inventory(inventory_id: int, payload: dict) -> Inventory:
    """Descriptive fields only; quantity goes through adjust_stock."""
    if "quantity" in (payload or {}):
        raise ValidationError("quantity cannot be edited directly; use a stock adjustment")

    inventory = get_inventory(inventory_id)
    patch = validate_payload(model=Inventory, payload=payload, policy=INVENTORY_POLICY, partial=True)
    enforce_rules_inventory(patch)

    if "name" in patch and patch["name"] != inventory.name:
        inventory.slug = unique_slug(Inventory, patch["name"], exclude_id=inventory_id)
    for key, value in patch.items():
        setattr(inventory, key, value)
    db.session.commit()
    return inventory


def dispose_inventory(inventory_id: int) -> Inventory:
    inventory = get_inventory(inventory_id)
    inventory.status = INVENTORY_DISPOSED
    db.session.commit()
    return inventory


def get_inventory(inventory_id: int) -> Inventory:
    inventory = db.session.get(Inventory, inventory_id)
    if not inventory:
        raise NotFoundError("Inventory not found", {"id": inventory_id})
    return inventory


def list_adjustments(inventory_id: int, *, limit: int = 50) -> list[InventoryAdjustment]:
    return (
        db.session.query(InventoryAdjustment)
        .filter_by(inventory_id=inventory_id)
        .order_by(InventoryAdjustment.created_at.desc(), InventoryAdjustment.id.desc())
        .limit(limit)
        .all()
    )


def list_inventories(
    *,
    inventory_type: str | None = None,
    condition: str | None = None,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Inventory], int]:
    query = db.session.query(Inventory)
    if inventory_type:
        query = query.filter(Inventory.type == inventory_type)
    if condition:
        query = query.filter(Inventory.condition == condition)
    if status:
        query = query.filter(Inventory.status == status)
    else:
        query = query.filter(Inventory.status != INVENTORY_DISPOSED)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Inventory.name.ilike(like), Inventory.location.ilike(like)))
    return paginate(query.order_by(Inventory.name.asc()), page, limit)

