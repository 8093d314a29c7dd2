# Overview: Flask API routes for court bookings; parses input and returns JSON responses.

"""
Booking API routes

- Create: public (guest booking); a staff token, when present, is recorded
- List, get and complete: any staff role
- Cancel: OWNER / ADMIN
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import MANAGERS, STAFF
from ..services import booking_service
from ..validation import coerce_datetime, coerce_int
from ..decorators import current_user_id, optional_auth, require_auth, require_role
from .params import date_arg, page_args, paged


bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


@bookings_bp.post("")
@optional_auth
def create_booking_route():
    """
    Reserve a court slot.

    Body: court_id, customer_name, customer_phone, customer_email?,
    start_time, end_time (ISO-8601), paid_amount_cents?, payment_status?, notes?
    """
    data = request.get_json(silent=True) or {}
    try:
        for key in ("court_id", "customer_name", "customer_phone", "start_time", "end_time"):
            if not data.get(key):
                return jsonify({"error": f"{key} is required"}), 400

        start_time = coerce_datetime("start_time", data["start_time"])
        end_time = coerce_datetime("end_time", data["end_time"])
        booking_service.validate_slot(start_time, end_time)

        paid = data.get("paid_amount_cents")
        booking, tx = booking_service.create_booking(
            court_id=coerce_int("court_id", data["court_id"]),
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            customer_email=data.get("customer_email"),
            start_time=start_time,
            end_time=end_time,
            paid_amount_cents=0 if paid is None else coerce_int("paid_amount_cents", paid),
            payment_status=data.get("payment_status"),
            notes=data.get("notes"),
            user_id=current_user_id(),
        )
        return jsonify({"booking": booking.to_dict(), "transaction": tx.to_dict(include_items=True)}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create booking")
        return jsonify({"error": "Internal server error"}), 500


@bookings_bp.get("")
@require_auth
@require_role(*STAFF)
def list_bookings_route():
    page, limit = page_args()
    try:
        rows, total = booking_service.list_bookings(
            court_id=request.args.get("court_id", type=int),
            booking_status=request.args.get("booking_status"),
            payment_status=request.args.get("payment_status"),
            on_date=date_arg("date"),
            page=page,
            limit=limit,
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(paged("bookings", rows, total, page, limit)), 200


@bookings_bp.get("/<int:booking_id>")
@require_auth
@require_role(*STAFF)
def get_booking_route(booking_id: int):
    try:
        return jsonify({"booking": booking_service.get_booking(booking_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@bookings_bp.post("/<int:booking_id>/cancel")
@require_auth
@require_role(*MANAGERS)
def cancel_booking_route(booking_id: int):
    try:
        return jsonify({"booking": booking_service.cancel_booking(booking_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to cancel booking")
        return jsonify({"error": "Internal server error"}), 500


@bookings_bp.post("/<int:booking_id>/complete")
@require_auth
@require_role(*STAFF)
def complete_booking_route(booking_id: int):
    try:
        return jsonify({"booking": booking_service.complete_booking(booking_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to complete booking")
        return jsonify({"error": "Internal server error"}), 500
