# Overview: Flask API routes for POS / rental checkout and transaction lifecycle.

"""
Transaction API routes

- Checkout, pay and list: any staff role
- Cancel and complete: OWNER / ADMIN
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import ServiceError
from ..models.auth import MANAGERS, STAFF
from ..services import transaction_service
from ..validation import coerce_int
from ..decorators import require_auth, require_role
from .params import date_arg, datetime_arg, page_args, paged


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


def _optional_int(data: dict, key: str):
    value = data.get(key)
    return None if value is None else coerce_int(key, value)


@transactions_bp.post("")
@require_auth
@require_role(*STAFF)
def create_transaction_route():
    """
    Checkout a POS or RENTAL transaction.

    Body:
        type: POS | RENTAL
        items: [{"item_type": "PRODUCT" | "MENU", "id": 1, "quantity": 2,
                 "expected_return_at": "...", "notes": "..."}]
        payment_method, paid_amount_cents, table_id?, customer_name?,
        deposit_amount_cents?, notes?
    """
    data = request.get_json(silent=True) or {}
    try:
        tx = transaction_service.create_transaction(
            tx_type=data.get("type"),
            items=data.get("items"),
            payment_method=data.get("payment_method"),
            paid_amount_cents=coerce_int("paid_amount_cents", data.get("paid_amount_cents")),
            user_id=g.current_user.id,
            table_id=_optional_int(data, "table_id"),
            customer_name=data.get("customer_name"),
            deposit_amount_cents=_optional_int(data, "deposit_amount_cents"),
            notes=data.get("notes"),
        )
        return jsonify({"transaction": tx.to_dict(include_items=True)}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("")
@require_auth
@require_role(*STAFF)
def list_transactions_route():
    page, limit = page_args()
    try:
        rows, total = transaction_service.list_transactions(
            tx_type=request.args.get("type"),
            status=request.args.get("status"),
            table_id=request.args.get("table_id", type=int),
            on_date=date_arg("date"),
            start=datetime_arg("start"),
            end=datetime_arg("end"),
            page=page,
            limit=limit,
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(paged("transactions", rows, total, page, limit)), 200


@transactions_bp.get("/<int:transaction_id>")
@require_auth
@require_role(*STAFF)
def get_transaction_route(transaction_id: int):
    try:
        tx = transaction_service.get_transaction(transaction_id)
        return jsonify({"transaction": tx.to_dict(include_items=True)}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@transactions_bp.post("/<int:transaction_id>/pay")
@require_auth
@require_role(*STAFF)
def pay_transaction_route(transaction_id: int):
    """Settle a PENDING transaction. Body: {"payment_method", "paid_amount_cents"}"""
    data = request.get_json(silent=True) or {}
    try:
        tx = transaction_service.pay_transaction(
            transaction_id,
            payment_method=data.get("payment_method"),
            paid_amount_cents=coerce_int("paid_amount_cents", data.get("paid_amount_cents")),
        )
        return jsonify({"transaction": tx.to_dict(include_items=True)}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to pay transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.post("/<int:transaction_id>/cancel")
@require_auth
@require_role(*MANAGERS)
def cancel_transaction_route(transaction_id: int):
    try:
        tx = transaction_service.cancel_transaction(transaction_id)
        return jsonify({"transaction": tx.to_dict(include_items=True)}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to cancel transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.post("/<int:transaction_id>/complete")
@require_auth
@require_role(*MANAGERS)
def complete_transaction_route(transaction_id: int):
    try:
        tx = transaction_service.complete_transaction(transaction_id)
        return jsonify({"transaction": tx.to_dict(include_items=True)}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to complete transaction")
        return jsonify({"error": "Internal server error"}), 500
