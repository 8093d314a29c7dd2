# Overview: Flask API routes for café tables; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import ServiceError
from ..models.auth import MANAGERS, STAFF
from ..services import venue_service
from ..decorators import require_auth, require_role
from .params import bool_arg


tables_bp = Blueprint("tables", __name__, url_prefix="/api/tables")


@tables_bp.get("")
@require_auth
@require_role(*STAFF)
def list_tables_route():
    tables = venue_service.list_tables(
        status=request.args.get("status"),
        active=bool_arg("active"),
        search=request.args.get("search"),
    )
    return jsonify({"tables": [t.to_dict() for t in tables]}), 200


@tables_bp.post("")
@require_auth
@require_role(*MANAGERS)
def create_table_route():
    try:
        table = venue_service.create_table(request.get_json(silent=True) or {})
        return jsonify({"table": table.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create table")
        return jsonify({"error": "Internal server error"}), 500


@tables_bp.get("/<int:table_id>")
@require_auth
@require_role(*STAFF)
def get_table_route(table_id: int):
    try:
        return jsonify({"table": venue_service.get_table(table_id).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@tables_bp.put("/<int:table_id>")
@require_auth
@require_role(*MANAGERS)
def update_table_route(table_id: int):
    try:
        table = venue_service.update_table(table_id, request.get_json(silent=True) or {})
        return jsonify({"table": table.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update table")
        return jsonify({"error": "Internal server error"}), 500


@tables_bp.post("/<int:table_id>/status")
@require_auth
@require_role(*STAFF)
def set_table_status_route(table_id: int):
    """
    Seat or clear a table.

    Body: {"status": "OCCUPIED", "customer_name": "...", "customer_phone": "..."}
    or {"status": "EMPTY"}.
    """
    data = request.get_json(silent=True) or {}
    try:
        table = venue_service.set_table_status(
            table_id,
            data.get("status"),
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
        )
        return jsonify({"table": table.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to set table status")
        return jsonify({"error": "Internal server error"}), 500


@tables_bp.post("/<int:table_id>/deactivate")
@require_auth
@require_role(*MANAGERS)
def deactivate_table_route(table_id: int):
    try:
        return jsonify({"table": venue_service.set_table_active(table_id, False).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@tables_bp.post("/<int:table_id>/activate")
@require_auth
@require_role(*MANAGERS)
def activate_table_route(table_id: int):
    try:
        return jsonify({"table": venue_service.set_table_active(table_id, True).to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
