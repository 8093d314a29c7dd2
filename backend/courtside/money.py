"""Helpers for integer-cent amounts and Decimal rounding."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

_WHOLE_CENT = Decimal("1")
_DECIMAL_2_PLACES = Decimal("0.01")


def round_cents(value: Any) -> int:
    """Round a fractional cent amount half-up to a whole number of cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int(value.quantize(_WHOLE_CENT, rounding=ROUND_HALF_UP))


def cents_to_decimal(cents: int | None) -> Decimal:
    """Convert integer cents into a two-place Decimal."""
    if cents is None:
        return Decimal("0.00")
    return (Decimal(cents) / Decimal(100)).quantize(_DECIMAL_2_PLACES, rounding=ROUND_HALF_UP)


def format_amount(cents: int | None) -> str:
    """Format cents as a plain two-place string ("12500.00")."""
    return str(cents_to_decimal(cents))


def percent_change(current: int, previous: int) -> float:
    """Trend percentage, one decimal place. No baseline counts as +100% when there is activity."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    change = (Decimal(current - previous) / Decimal(previous)) * Decimal(100)
    return float(change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
