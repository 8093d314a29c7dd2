# Overview: Query-string helpers shared by the API blueprints.

from __future__ import annotations

from flask import request

from ..errors import ValidationError
from ..services.pagination import page_meta
from ..time_utils import parse_iso_date, parse_iso_datetime


def bool_arg(name: str) -> bool | None:
    """"true"/"false" -> bool; absent -> None."""
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return raw.lower() in ("1", "true", "yes")


def page_args(default_limit: int = 20) -> tuple[int, int]:
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", default_limit, type=int)
    return page, limit


def date_arg(name: str):
    try:
        return parse_iso_date(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")


def datetime_arg(name: str):
    try:
        return parse_iso_datetime(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 datetime")


def paged(key: str, rows, total: int, page: int, limit: int) -> dict:
    return {key: [row.to_dict() for row in rows], "pagination": page_meta(page, limit, total)}
