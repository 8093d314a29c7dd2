from datetime import timedelta

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_role
from ..errors import ServiceError
from ..models.auth import MANAGERS
from ..services import rental_service, reporting_service
from ..time_utils import day_bounds, utcnow
from .params import date_arg


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
@require_role(*MANAGERS)
def dashboard():
    try:
        summary = reporting_service.dashboard_summary(today=date_arg("date"))
        return jsonify(summary), 200
    except ServiceError as exc:
        return jsonify(exc.to_dict()), exc.status_code


@reports_bp.get("/sales")
@require_auth
@require_role(*MANAGERS)
def sales_report():
    """?start=YYYY-MM-DD&end=YYYY-MM-DD, both inclusive; defaults to the last 7 days."""
    try:
        end_day = date_arg("end") or utcnow().date()
        start_day = date_arg("start") or end_day - timedelta(days=6)
        if start_day > end_day:
            return jsonify({"error": "start must be on or before end"}), 400

        start, _ = day_bounds(start_day)
        _, end = day_bounds(end_day)
        return jsonify(reporting_service.sales_report(start, end)), 200
    except ServiceError as exc:
        return jsonify(exc.to_dict()), exc.status_code


@reports_bp.get("/product-rentals")
@require_auth
@require_role(*MANAGERS)
def product_rentals_report():
    return jsonify({"products": rental_service.product_rent_stats()}), 200


@reports_bp.get("/product-sales")
@require_auth
@require_role(*MANAGERS)
def product_sales_report():
    return jsonify({"products": rental_service.product_sell_stats()}), 200
