# Overview: Flask API routes for product rent and sell records.

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import STAFF
from ..services import rental_service
from ..validation import coerce_datetime
from ..decorators import require_auth, require_role
from .params import bool_arg, page_args, paged


product_rents_bp = Blueprint("product_rents", __name__, url_prefix="/api/product-rents")
product_sells_bp = Blueprint("product_sells", __name__, url_prefix="/api/product-sells")


@product_rents_bp.get("")
@require_auth
@require_role(*STAFF)
def list_rent_records_route():
    page, limit = page_args()
    rows, total = rental_service.list_rent_records(
        status=request.args.get("status"),
        product_id=request.args.get("product_id", type=int),
        overdue_only=bool(bool_arg("overdue")),
        page=page,
        limit=limit,
    )
    return jsonify(paged("rent_records", rows, total, page, limit)), 200


@product_rents_bp.get("/active")
@require_auth
@require_role(*STAFF)
def list_active_rentals_route():
    rows = rental_service.list_active_rentals()
    return jsonify({"rent_records": [r.to_dict() for r in rows]}), 200


@product_rents_bp.get("/stats")
@require_auth
@require_role(*STAFF)
def rent_stats_route():
    return jsonify({"stats": rental_service.product_rent_stats()}), 200


@product_rents_bp.get("/<int:record_id>")
@require_auth
@require_role(*STAFF)
def get_rent_record_route(record_id: int):
    try:
        return jsonify({"rent_record": rental_service.get_rent_record(record_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@product_rents_bp.post("/<int:record_id>/return")
@require_auth
@require_role(*STAFF)
def return_rent_record_route(record_id: int):
    """Return one rented line. Body: {"returned_at"?: ISO-8601}"""
    data = request.get_json(silent=True) or {}
    try:
        returned_at = data.get("returned_at")
        record = rental_service.return_rent_record(
            record_id,
            returned_at=coerce_datetime("returned_at", returned_at) if returned_at else None,
        )
        return jsonify({"rent_record": record.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to return rent record")
        return jsonify({"error": "Internal server error"}), 500


@product_sells_bp.get("")
@require_auth
@require_role(*STAFF)
def list_sell_records_route():
    page, limit = page_args()
    rows, total = rental_service.list_sell_records(
        status=request.args.get("status"),
        product_id=request.args.get("product_id", type=int),
        page=page,
        limit=limit,
    )
    return jsonify(paged("sell_records", rows, total, page, limit)), 200


@product_sells_bp.get("/stats")
@require_auth
@require_role(*STAFF)
def sell_stats_route():
    return jsonify({"stats": rental_service.product_sell_stats()}), 200


@product_sells_bp.get("/<int:record_id>")
@require_auth
@require_role(*STAFF)
def get_sell_record_route(record_id: int):
    try:
        return jsonify({"sell_record": rental_service.get_sell_record(record_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
