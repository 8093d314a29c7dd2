# Overview: Occupancy store: café tables and courts.

from __future__ import annotations

from sqlalchemy import or_

from ..errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Court, Table
from ..models.venue import (
    COURT_ACTIVE,
    COURT_INACTIVE,
    TABLE_EMPTY,
    TABLE_OCCUPIED,
    VALID_COURT_STATUSES,
    VALID_COURT_TYPES,
    VALID_TABLE_STATUSES,
)
from ..time_utils import utcnow
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_court,
    enforce_rules_table,
    validate_payload,
)
from .slug_service import unique_slug

TABLE_POLICY = ModelValidationPolicy(
    writable_fields={"code", "name", "capacity", "location"},
    required_on_create={"code", "name"},
)

COURT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "type", "surface", "status", "price_per_hour_cents", "is_visible"},
    required_on_create={"name", "price_per_hour_cents"},
    choices={"type": VALID_COURT_TYPES, "status": VALID_COURT_STATUSES},
)


# =============================================================================
# Tables
# =============================================================================

def occupy_table(table: Table, customer_name: str | None, customer_phone: str | None = None) -> None:
    """Mark OCCUPIED; the customer name and timestamp move with the status."""
    table.status = TABLE_OCCUPIED
    table.current_customer_name = customer_name or "Walk-in"
    table.current_customer_phone = customer_phone
    table.occupied_at = utcnow()


def release_table(table: Table) -> None:
    """Mark EMPTY and clear every customer field."""
    table.status = TABLE_EMPTY
    table.current_customer_name = None
    table.current_customer_phone = None
    table.occupied_at = None


def create_table(payload: dict) -> Table:
    patch = validate_payload(model=Table, payload=payload, policy=TABLE_POLICY, partial=False)
    enforce_rules_table(patch)
    if db.session.query(Table).filter_by(code=patch["code"]).first():
        raise ConflictError(f"Table code '{patch['code']}' already exists")

    table = Table(**patch)
    table.status = TABLE_EMPTY
    db.session.add(table)
    db.session.commit()
    return table


def update_table(table_id: int, payload: dict) -> Table:
    table = get_table(table_id)
    patch = validate_payload(model=Table, payload=payload, policy=TABLE_POLICY, partial=True)
    enforce_rules_table(patch)
    if "code" in patch and patch["code"] != table.code:
        if db.session.query(Table).filter(Table.code == patch["code"], Table.id != table_id).first():
            raise ConflictError(f"Table code '{patch['code']}' already exists")

    for key, value in patch.items():
        setattr(table, key, value)
    db.session.commit()
    return table


def set_table_status(
    table_id: int,
    status: str,
    customer_name: str | None = None,
    customer_phone: str | None = None,
) -> Table:
    if status not in VALID_TABLE_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(VALID_TABLE_STATUSES)}")

    table = get_table(table_id)
    if status == TABLE_OCCUPIED:
        if not customer_name or not customer_name.strip():
            raise ValidationError("customer_name is required to occupy a table")
        if not table.is_active:
            raise InvalidStateError("Table is inactive")
        occupy_table(table, customer_name.strip(), customer_phone)
    else:
        release_table(table)
    db.session.commit()
    return table


def set_table_active(table_id: int, is_active: bool) -> Table:
    table = get_table(table_id)
    if not is_active and table.status == TABLE_OCCUPIED:
        raise InvalidStateError("Cannot deactivate an occupied table")
    table.is_active = is_active
    db.session.commit()
    return table


def get_table(table_id: int) -> Table:
    table = db.session.get(Table, table_id)
    if not table:
        raise NotFoundError("Table not found", {"id": table_id})
    return table


def get_table_by_code(code: str) -> Table | None:
    return db.session.query(Table).filter_by(code=(code or "").strip()).first()


def validate_table_code(code: str) -> tuple[bool, Table | None]:
    """Guest QR check: the code must name an active table."""
    table = get_table_by_code(code)
    if not table or not table.is_active:
        return False, None
    return True, table


def list_tables(
    *,
    status: str | None = None,
    active: bool | None = None,
    search: str | None = None,
) -> list[Table]:
    query = db.session.query(Table)
    if status:
        query = query.filter(Table.status == status)
    if active is not None:
        query = query.filter(Table.is_active.is_(active))
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Table.code.ilike(like), Table.name.ilike(like)))
    return query.order_by(Table.code.asc()).all()


def seed_tables(count: int) -> list[Table]:
    """Create T01..Tnn, skipping codes that already exist. Returns the new rows."""
    created = []
    for n in range(1, count + 1):
        code = f"T{n:02d}"
        if get_table_by_code(code):
            continue
        table = Table(code=code, name=f"Table {n}", capacity=4, status=TABLE_EMPTY)
        db.session.add(table)
        created.append(table)
    db.session.commit()
    return created


# =============================================================================
# Courts
# =============================================================================

def create_court(payload: dict) -> Court:
    patch = validate_payload(model=Court, payload=payload, policy=COURT_POLICY, partial=False)
    enforce_rules_court(patch)

    court = Court(**patch)
    court.slug = unique_slug(Court, patch["name"])
    db.session.add(court)
    db.session.commit()
    return court


def update_court(court_id: int, payload: dict) -> Court:
    court = get_court(court_id)
    patch = validate_payload(model=Court, payload=payload, policy=COURT_POLICY, partial=True)
    enforce_rules_court(patch)

    if "name" in patch and patch["name"] != court.name:
        court.slug = unique_slug(Court, patch["name"], exclude_id=court_id)
    for key, value in patch.items():
        setattr(court, key, value)
    db.session.commit()
    return court


def get_court(court_id: int) -> Court:
    court = db.session.get(Court, court_id)
    if not court:
        raise NotFoundError("Court not found", {"id": court_id})
    return court


def list_courts(*, status: str | None = None, visible: bool | None = None) -> list[Court]:
    query = db.session.query(Court)
    if status:
        query = query.filter(Court.status == status)
    if visible is not None:
        query = query.filter(Court.is_visible.is_(visible))
    return query.order_by(Court.name.asc()).all()


def deactivate_court(court_id: int) -> Court:
    court = get_court(court_id)
    court.status = COURT_INACTIVE
    db.session.commit()
    return court


def activate_court(court_id: int) -> Court:
    court = get_court(court_id)
    court.status = COURT_ACTIVE
    db.session.commit()
    return court
