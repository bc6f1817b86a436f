"""Decimal helpers for currency amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

__all__ = ["ZERO", "to_money"]

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce ``value`` (Decimal, int, float or SQL aggregate) to a 2dp Decimal."""

    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)
