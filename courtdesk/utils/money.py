"""Geldbeträge: Rundung auf Cent (kaufmännisch)"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal]

CENT = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Konvertiert int/float/Decimal verlustarm über die String-Darstellung"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    """Rundet kaufmännisch (half-up) auf zwei Nachkommastellen"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def is_valid_amount(value: Number) -> bool:
    """True für endliche, nicht-negative Beträge"""
    if isinstance(value, Decimal):
        return value.is_finite() and value >= 0
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return value >= 0
