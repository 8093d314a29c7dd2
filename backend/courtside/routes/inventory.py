# Overview: Flask API routes for venue inventory and stock adjustments.

"""
Inventory routes.

SECURITY: All routes require authentication.
- Reads are open to all staff roles
- Create, update, dispose and adjust require OWNER or ADMIN

Quantity never changes through PUT; every change is a POST to /adjust,
which writes one adjustment row in the same unit.
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import MANAGERS, STAFF
from ..services import inventory_service
from ..validation import coerce_int
from ..decorators import current_user_id, require_auth, require_role
from .params import page_args, paged


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventories")


@inventory_bp.get("")
@require_auth
@require_role(*STAFF)
def list_inventories_route():
    page, limit = page_args()
    rows, total = inventory_service.list_inventories(
        inventory_type=request.args.get("type"),
        condition=request.args.get("condition"),
        status=request.args.get("status"),
        search=request.args.get("search"),
        page=page,
        limit=limit,
    )
    return jsonify(paged("inventories", rows, total, page, limit)), 200


@inventory_bp.post("")
@require_auth
@require_role(*MANAGERS)
def create_inventory_route():
    try:
        inventory = inventory_service.create_inventory(
            request.get_json(silent=True) or {},
            actor_user_id=current_user_id(),
        )
        return jsonify({"inventory": inventory.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create inventory")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<int:inventory_id>")
@require_auth
@require_role(*STAFF)
def get_inventory_route(inventory_id: int):
    """Inventory item with its adjustments, newest first."""
    try:
        inventory = inventory_service.get_inventory(inventory_id)
        adjustments = inventory_service.list_adjustments(inventory_id)
        return jsonify({
            "inventory": inventory.to_dict(),
            "adjustments": [a.to_dict() for a in adjustments],
        }), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@inventory_bp.put("/<int:inventory_id>")
@require_auth
@require_role(*MANAGERS)
def update_inventory_route(inventory_id: int):
    try:
        inventory = inventory_service.update_inventory(inventory_id, request.get_json(silent=True) or {})
        return jsonify({"inventory": inventory.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update inventory")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/<int:inventory_id>/dispose")
@require_auth
@require_role(*MANAGERS)
def dispose_inventory_route(inventory_id: int):
    try:
        return jsonify({"inventory": inventory_service.dispose_inventory(inventory_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@inventory_bp.post("/<int:inventory_id>/adjust")
@require_auth
@require_role(*MANAGERS)
def adjust_inventory_route(inventory_id: int):
    """Body: {"change_type": "ADD" | "REMOVE" | "CORRECTION", "amount": 3, "reason": "..."}"""
    data = request.get_json(silent=True) or {}
    try:
        inventory, adjustment = inventory_service.adjust_stock(
            inventory_id,
            change_type=data.get("change_type"),
            amount=coerce_int("amount", data.get("amount")),
            reason=data.get("reason"),
            actor_user_id=current_user_id(),
        )
        return jsonify({"inventory": inventory.to_dict(), "adjustment": adjustment.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to adjust inventory")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<int:inventory_id>/adjustments")
@require_auth
@require_role(*STAFF)
def list_adjustments_route(inventory_id: int):
    try:
        inventory_service.get_inventory(inventory_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    limit = request.args.get("limit", 50, type=int)
    adjustments = inventory_service.list_adjustments(inventory_id, limit=min(max(limit, 1), 200))
    return jsonify({"adjustments": [a.to_dict() for a in adjustments]}), 200
