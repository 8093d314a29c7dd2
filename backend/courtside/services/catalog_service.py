# Overview: Catalog store: product/menu categories, products and menus.

"""
Catalog CRUD. Deactivation is the soft delete; rows are never removed
because historical transaction lines reference them.

Stock can be seeded at creation only. After that it belongs to the
transaction engine, so update payloads that carry `stock` are rejected.
"""

from __future__ import annotations

from sqlalchemy import or_

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Menu, MenuCategory, Product, ProductCategory
from ..models.catalog import VALID_PRODUCT_TYPES
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_priced_item,
    validate_payload,
)
from .pagination import paginate
from .slug_service import unique_slug

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "is_active"},
    required_on_create={"name"},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "sku", "type", "price_cents", "cost_price_cents",
        "stock", "product_category_id", "is_active",
    },
    required_on_create={"name", "price_cents", "type"},
    choices={"type": VALID_PRODUCT_TYPES},
)

MENU_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "sku", "price_cents", "cost_price_cents",
        "stock", "menu_category_id", "is_available", "is_active",
    },
    required_on_create={"name", "price_cents"},
)

CATEGORY_MODELS = {
    "product": ProductCategory,
    "menu": MenuCategory,
}


def _get_or_404(model, entity_id: int, label: str):
    entity = db.session.get(model, entity_id)
    if not entity:
        raise NotFoundError(f"{label} not found", {"id": entity_id})
    return entity


# =============================================================================
# Categories
# =============================================================================

def create_category(kind: str, payload: dict):
    model = CATEGORY_MODELS[kind]
    patch = validate_payload(model=model, payload=payload, policy=CATEGORY_POLICY, partial=False)

    if db.session.query(model).filter_by(name=patch["name"]).first():
        raise ConflictError(f"Category '{patch['name']}' already exists")

    category = model(**patch)
    category.slug = unique_slug(model, patch["name"])
    db.session.add(category)
    db.session.commit()
    return category


def update_category(kind: str, category_id: int, payload: dict):
    model = CATEGORY_MODELS[kind]
    category = _get_or_404(model, category_id, "Category")
    patch = validate_payload(model=model, payload=payload, policy=CATEGORY_POLICY, partial=True)

    if "name" in patch and patch["name"] != category.name:
        clash = db.session.query(model).filter(model.name == patch["name"], model.id != category_id).first()
        if clash:
            raise ConflictError(f"Category '{patch['name']}' already exists")
        category.slug = unique_slug(model, patch["name"], exclude_id=category_id)

    for key, value in patch.items():
        setattr(category, key, value)
    db.session.commit()
    return category


def get_category(kind: str, category_id: int):
    return _get_or_404(CATEGORY_MODELS[kind], category_id, "Category")


def list_categories(kind: str, *, active: bool | None = None):
    model = CATEGORY_MODELS[kind]
    query = db.session.query(model)
    if active is not None:
        query = query.filter(model.is_active.is_(active))
    return query.order_by(model.name.asc()).all()


def set_category_active(kind: str, category_id: int, is_active: bool):
    category = get_category(kind, category_id)
    category.is_active = is_active
    db.session.commit()
    return category


# =============================================================================
# Products and menus
# =============================================================================

def _check_sku(model, sku: str | None, exclude_id: int | None = None) -> None:
    if not sku:
        return
    query = db.session.query(model).filter(model.sku == sku)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first():
        raise ConflictError(f"SKU '{sku}' already exists", {"sku": sku})


def _check_category(model, category_id: int | None) -> None:
    if category_id is not None and not db.session.get(model, category_id):
        raise NotFoundError("Category not found", {"id": category_id})


def create_product(payload: dict) -> Product:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_priced_item(patch)
    _check_sku(Product, patch.get("sku"))
    _check_category(ProductCategory, patch.get("product_category_id"))

    product = Product(**patch)
    if product.stock is None:
        product.stock = 0
    product.slug = unique_slug(Product, patch["name"])
    db.session.add(product)
    db.session.commit()
    return product


def update_product(product_id: int, payload: dict) -> Product:
    product = _get_or_404(Product, product_id, "Product")
    if "stock" in (payload or {}):
        raise ValidationError("stock cannot be edited; it changes only through transactions")

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_priced_item(patch)
    _check_sku(Product, patch.get("sku"), exclude_id=product_id)
    _check_category(ProductCategory, patch.get("product_category_id"))

    if "name" in patch and patch["name"] != product.name:
        product.slug = unique_slug(Product, patch["name"], exclude_id=product_id)
    for key, value in patch.items():
        setattr(product, key, value)
    db.session.commit()
    return product


def get_product(product_id: int) -> Product:
    return _get_or_404(Product, product_id, "Product")


def list_products(
    *,
    active: bool | None = None,
    product_type: str | None = None,
    category_id: int | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Product], int]:
    query = db.session.query(Product)
    if active is not None:
        query = query.filter(Product.is_active.is_(active))
    if product_type:
        query = query.filter(Product.type == product_type)
    if category_id:
        query = query.filter(Product.product_category_id == category_id)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    return paginate(query.order_by(Product.name.asc()), page, limit)


def set_product_active(product_id: int, is_active: bool) -> Product:
    product = get_product(product_id)
    product.is_active = is_active
    db.session.commit()
    return product


def create_menu(payload: dict) -> Menu:
    patch = validate_payload(model=Menu, payload=payload, policy=MENU_POLICY, partial=False)
    enforce_rules_priced_item(patch)
    _check_sku(Menu, patch.get("sku"))
    _check_category(MenuCategory, patch.get("menu_category_id"))

    menu = Menu(**patch)
    menu.slug = unique_slug(Menu, patch["name"])
    db.session.add(menu)
    db.session.commit()
    return menu


def update_menu(menu_id: int, payload: dict) -> Menu:
    menu = _get_or_404(Menu, menu_id, "Menu")
    if "stock" in (payload or {}):
        raise ValidationError("stock cannot be edited; it changes only through transactions")

    patch = validate_payload(model=Menu, payload=payload, policy=MENU_POLICY, partial=True)
    enforce_rules_priced_item(patch)
    _check_sku(Menu, patch.get("sku"), exclude_id=menu_id)
    _check_category(MenuCategory, patch.get("menu_category_id"))

    if "name" in patch and patch["name"] != menu.name:
        menu.slug = unique_slug(Menu, patch["name"], exclude_id=menu_id)
    for key, value in patch.items():
        setattr(menu, key, value)
    db.session.commit()
    return menu


def get_menu(menu_id: int) -> Menu:
    return _get_or_404(Menu, menu_id, "Menu")


def list_menus(
    *,
    active: bool | None = None,
    available: bool | None = None,
    category_id: int | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Menu], int]:
    query = db.session.query(Menu)
    if active is not None:
        query = query.filter(Menu.is_active.is_(active))
    if available is not None:
        query = query.filter(Menu.is_available.is_(available))
    if category_id:
        query = query.filter(Menu.menu_category_id == category_id)
    if search:
        query = query.filter(Menu.name.ilike(f"%{search}%"))
    return paginate(query.order_by(Menu.name.asc()), page, limit)


def set_menu_active(menu_id: int, is_active: bool) -> Menu:
    menu = get_menu(menu_id)
    menu.is_active = is_active
    db.session.commit()
    return menu
