# Overview: Flask API routes for courts and their daily availability.

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import MANAGERS, STAFF
from ..models.venue import COURT_ACTIVE
from ..services import booking_service, venue_service
from ..decorators import optional_auth, require_auth, require_role
from ..time_utils import utcnow
from .params import bool_arg, date_arg


courts_bp = Blueprint("courts", __name__, url_prefix="/api/courts")


@courts_bp.get("")
@require_auth
@require_role(*STAFF)
def list_courts_route():
    courts = venue_service.list_courts(status=request.args.get("status"), visible=bool_arg("visible"))
    return jsonify({"courts": [c.to_dict() for c in courts]}), 200


@courts_bp.get("/public")
@optional_auth
def list_public_courts_route():
    """Courts a guest can book: visible and ACTIVE."""
    courts = venue_service.list_courts(status=COURT_ACTIVE, visible=True)
    return jsonify({"courts": [c.to_dict() for c in courts]}), 200


@courts_bp.post("")
@require_auth
@require_role(*MANAGERS)
def create_court_route():
    try:
        court = venue_service.create_court(request.get_json(silent=True) or {})
        return jsonify({"court": court.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create court")
        return jsonify({"error": "Internal server error"}), 500


@courts_bp.get("/<int:court_id>")
@require_auth
@require_role(*STAFF)
def get_court_route(court_id: int):
    try:
        return jsonify({"court": venue_service.get_court(court_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@courts_bp.put("/<int:court_id>")
@require_auth
@require_role(*MANAGERS)
def update_court_route(court_id: int):
    try:
        court = venue_service.update_court(court_id, request.get_json(silent=True) or {})
        return jsonify({"court": court.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update court")
        return jsonify({"error": "Internal server error"}), 500


@courts_bp.post("/<int:court_id>/deactivate")
@require_auth
@require_role(*MANAGERS)
def deactivate_court_route(court_id: int):
    try:
        return jsonify({"court": venue_service.deactivate_court(court_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@courts_bp.post("/<int:court_id>/activate")
@require_auth
@require_role(*MANAGERS)
def activate_court_route(court_id: int):
    try:
        return jsonify({"court": venue_service.activate_court(court_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@courts_bp.get("/<int:court_id>/availability")
@optional_auth
def court_availability_route(court_id: int):
    """Busy intervals for ?date=YYYY-MM-DD (defaults to today, UTC)."""
    try:
        day = date_arg("date") or utcnow().date()
        return jsonify(booking_service.get_court_availability(court_id, day)), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
