# Overview: Flask API routes for guest order requests placed from table QR codes.

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import STAFF
from ..services import order_request_service, venue_service
from ..decorators import current_user_id, require_auth, require_role
from .params import page_args, paged


order_requests_bp = Blueprint("order_requests", __name__, url_prefix="/api/order-requests")


@order_requests_bp.get("/validate-table/<string:code>")
def validate_table_route(code: str):
    """Public: guests scan a table QR code before ordering."""
    valid, table = venue_service.validate_table_code(code)
    return jsonify({"valid": valid, "table": table.to_dict() if table else None}), 200


@order_requests_bp.post("")
def create_order_request_route():
    """
    Public: place an order from a table.

    Body: table_code, customer_name, notes?, items: [{"menu_id", "quantity",
    "unit_price_cents", "subtotal_cents", "notes"?}]
    """
    data = request.get_json(silent=True) or {}
    try:
        order = order_request_service.create_order_request(
            table_code=data.get("table_code"),
            customer_name=data.get("customer_name"),
            items=data.get("items"),
            notes=data.get("notes"),
        )
        return jsonify({"order_request": order.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create order request")
        return jsonify({"error": "Internal server error"}), 500


@order_requests_bp.get("")
@require_auth
@require_role(*STAFF)
def list_order_requests_route():
    page, limit = page_args()
    rows, total = order_request_service.list_order_requests(
        status=request.args.get("status"),
        table_id=request.args.get("table_id", type=int),
        page=page,
        limit=limit,
    )
    return jsonify(paged("order_requests", rows, total, page, limit)), 200


@order_requests_bp.get("/<int:order_id>")
@require_auth
@require_role(*STAFF)
def get_order_request_route(order_id: int):
    try:
        return jsonify({"order_request": order_request_service.get_order_request(order_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@order_requests_bp.patch("/<int:order_id>/status")
@require_auth
@require_role(*STAFF)
def update_order_status_route(order_id: int):
    """Body: {"status": "APPROVED" | ..., "rejected_reason"?: "..."}"""
    data = request.get_json(silent=True) or {}
    try:
        order = order_request_service.update_status(
            order_id,
            data.get("status"),
            actor_user_id=current_user_id(),
            rejected_reason=data.get("rejected_reason"),
        )
        return jsonify({"order_request": order.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update order request status")
        return jsonify({"error": "Internal server error"}), 500
