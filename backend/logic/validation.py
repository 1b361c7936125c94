# backend/logic/validation.py
"""
Client-side form checks. Every failure raises ``ValidationError`` before any
write is attempted.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from backend.errors import ValidationError
from backend.logic.aggregation import receipt_remaining
from backend.logic.money import CENT, Money
from backend.models import ExpenseAllocation, Receipt

MAX_IMAGE_BYTES = 5 * 1024 * 1024


def require_text(value: Optional[str], field: str, label: Optional[str] = None) -> str:
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"{label or field} is required.", field=field)
    return v


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


def parse_money(
    value: Any,
    field: str,
    label: Optional[str] = None,
    minimum: Decimal = Decimal("0"),
    strictly_positive: bool = False,
) -> Money:
    name = label or field
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{name} is required.", field=field)
    clean = str(value).replace("$", "").replace(",", "").strip()
    try:
        d = Decimal(clean)
    except InvalidOperation:
        raise ValidationError(f"{name} must be a number.", field=field)
    if not d.is_finite():
        raise ValidationError(f"{name} must be a number.", field=field)
    d = d.quantize(CENT, rounding=ROUND_HALF_UP)
    if strictly_positive and d <= 0:
        raise ValidationError(f"{name} must be greater than 0.", field=field)
    if d < minimum:
        raise ValidationError(f"{name} must be at least {minimum}.", field=field)
    return d


def parse_quantity(value: Any, field: str = "quantity") -> int:
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError("Quantity must be a whole number.", field=field)
    if not d.is_finite() or d != d.to_integral_value():
        raise ValidationError("Quantity must be a whole number.", field=field)
    q = int(d)
    if q <= 0:
        raise ValidationError("Quantity must be greater than 0.", field=field)
    return q


def validate_image(content_type: Optional[str], size: int) -> None:
    if not (content_type or "").startswith("image/"):
        raise ValidationError("File must be an image", field="file")
    if size > MAX_IMAGE_BYTES:
        raise ValidationError("Image size must be less than 5MB", field="file")


def validate_allocation(
    amount: Money,
    receipt: Receipt,
    existing: Iterable[ExpenseAllocation],
) -> Money:
    """
    An allocation may not exceed what is left on its receipt after every
    other allocation against that receipt.
    """
    if amount <= 0:
        raise ValidationError("Allocated amount must be greater than 0.", field="allocated_amount")
    remaining = receipt_remaining(receipt, existing)
    if amount > remaining:
        raise ValidationError(
            f"Allocated amount exceeds the receipt's remaining balance ({remaining}).",
            field="allocated_amount",
        )
    return amount


def total_pay(quantity: int, rate: Money) -> Money:
    return (Decimal(quantity) * rate).quantize(CENT, rounding=ROUND_HALF_UP)
