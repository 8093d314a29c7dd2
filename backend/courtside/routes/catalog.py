# Overview: Flask API routes for categories, products and menus; parses input and returns JSON responses.

"""
Catalog routes.

SECURITY: All routes require authentication.
- Reads are open to all staff roles
- Writes (create, update, activate, deactivate) require OWNER or ADMIN
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import MANAGERS, STAFF
from ..services import catalog_service
from ..decorators import require_auth, require_role
from .params import bool_arg, page_args, paged


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")

CATEGORY_KINDS = "<any(product, menu):kind>-categories"


# =============================================================================
# Categories
# =============================================================================

@catalog_bp.get(f"/{CATEGORY_KINDS}")
@require_auth
@require_role(*STAFF)
def list_categories_route(kind: str):
    categories = catalog_service.list_categories(kind, active=bool_arg("active"))
    return jsonify({"categories": [c.to_dict() for c in categories]}), 200


@catalog_bp.post(f"/{CATEGORY_KINDS}")
@require_auth
@require_role(*MANAGERS)
def create_category_route(kind: str):
    try:
        category = catalog_service.create_category(kind, request.get_json(silent=True) or {})
        return jsonify({"category": category.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create %s category", kind)
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.get(f"/{CATEGORY_KINDS}/<int:category_id>")
@require_auth
@require_role(*STAFF)
def get_category_route(kind: str, category_id: int):
    try:
        return jsonify({"category": catalog_service.get_category(kind, category_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@catalog_bp.put(f"/{CATEGORY_KINDS}/<int:category_id>")
@require_auth
@require_role(*MANAGERS)
def update_category_route(kind: str, category_id: int):
    try:
        category = catalog_service.update_category(kind, category_id, request.get_json(silent=True) or {})
        return jsonify({"category": category.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update %s category", kind)
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.post(f"/{CATEGORY_KINDS}/<int:category_id>/deactivate")
@require_auth
@require_role(*MANAGERS)
def deactivate_category_route(kind: str, category_id: int):
    try:
        category = catalog_service.set_category_active(kind, category_id, False)
        return jsonify({"category": category.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@catalog_bp.post(f"/{CATEGORY_KINDS}/<int:category_id>/activate")
@require_auth
@require_role(*MANAGERS)
def activate_category_route(kind: str, category_id: int):
    try:
        category = catalog_service.set_category_active(kind, category_id, True)
        return jsonify({"category": category.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


# =============================================================================
# Products
# =============================================================================

@catalog_bp.get("/products")
@require_auth
@require_role(*STAFF)
def list_products_route():
    page, limit = page_args(default_limit=50)
    rows, total = catalog_service.list_products(
        active=bool_arg("active"),
        product_type=request.args.get("type"),
        category_id=request.args.get("category_id", type=int),
        search=request.args.get("search"),
        page=page,
        limit=limit,
    )
    return jsonify(paged("products", rows, total, page, limit)), 200


@catalog_bp.post("/products")
@require_auth
@require_role(*MANAGERS)
def create_product_route():
    try:
        product = catalog_service.create_product(request.get_json(silent=True) or {})
        return jsonify({"product": product.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.get("/products/<int:product_id>")
@require_auth
@require_role(*STAFF)
def get_product_route(product_id: int):
    try:
        return jsonify({"product": catalog_service.get_product(product_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@catalog_bp.put("/products/<int:product_id>")
@require_auth
@require_role(*MANAGERS)
def update_product_route(product_id: int):
    try:
        product = catalog_service.update_product(product_id, request.get_json(silent=True) or {})
        return jsonify({"product": product.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.post("/products/<int:product_id>/deactivate")
@require_auth
@require_role(*MANAGERS)
def deactivate_product_route(product_id: int):
    try:
        return jsonify({"product": catalog_service.set_product_active(product_id, False).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@catalog_bp.post("/products/<int:product_id>/activate")
@require_auth
@require_role(*MANAGERS)
def activate_product_route(product_id: int):
    try:
        return jsonify({"product": catalog_service.set_product_active(product_id, True).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


# =============================================================================
# Menus
# =============================================================================

@catalog_bp.get("/menus")
@require_auth
@require_role(*STAFF)
def list_menus_route():
    page, limit = page_args(default_limit=50)
    rows, total = catalog_service.list_menus(
        active=bool_arg("active"),
        available=bool_arg("available"),
        category_id=request.args.get("category_id", type=int),
        search=request.args.get("search"),
        page=page,
        limit=limit,
    )
    return jsonify(paged("menus", rows, total, page, limit)), 200


@catalog_bp.post("/menus")
@require_auth
@require_role(*MANAGERS)
def create_menu_route():
    try:
        menu = catalog_service.create_menu(request.get_json(silent=True) or {})
        return jsonify({"menu": menu.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create menu")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.get("/menus/<int:menu_id>")
@require_auth
@require_role(*STAFF)
def get_menu_route(menu_id: int):
    try:
        return jsonify({"menu": catalog_service.get_menu(menu_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@catalog_bp.put("/menus/<int:menu_id>")
@require_auth
@require_role(*MANAGERS)
def update_menu_route(menu_id: int):
    try:
        menu = catalog_service.update_menu(menu_id, request.get_json(silent=True) or {})
        return jsonify({"menu": menu.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update menu")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.post("/menus/<int:menu_id>/deactivate")
@require_auth
@require_role(*MANAGERS)
def deactivate_menu_route(menu_id: int):
    try:
        return jsonify({"menu": catalog_service.set_menu_active(menu_id, False).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@catalog_bp.post("/menus/<int:menu_id>/activate")
@require_auth
@require_role(*MANAGERS)
def activate_menu_route(menu_id: int):
    try:
        return jsonify({"menu": catalog_service.set_menu_active(menu_id, True).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
