from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable


Money = Decimal

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(v: Any) -> Money:
    """
    Coerce a backend amount to cents. None, empty strings and unparseable
    values count as zero, never as an error.
    """
    if v is None or v == "":
        return ZERO
    if isinstance(v, bool):
        return ZERO
    if isinstance(v, Decimal):
        if not v.is_finite():
            return ZERO
        return v.quantize(CENT, rounding=ROUND_HALF_UP)
    try:
        d = Decimal(str(v))
    except (InvalidOperation, ValueError):
        return ZERO
    if not d.is_finite():
        return ZERO
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Any]) -> Money:
    return sum((to_money(v) for v in values), ZERO).quantize(CENT)


def percent(part: Money, whole: Money) -> Decimal:
    # one decimal place, 0 when the base is 0
    if not whole:
        return Decimal("0.0")
    return (Decimal(part) / Decimal(whole) * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def fmt_money(v: Any) -> str:
    d = to_money(v)
    sign = "-" if d < 0 else ""
    return f"{sign}${abs(d):,.2f}"
