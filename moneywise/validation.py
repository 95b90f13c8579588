from decimal import Decimal, InvalidOperation
from typing import Optional

from moneywise.domain import CATEGORIES
from moneywise.errors import ValidationError


def to_amount(value, field: str = "amount") -> Decimal:
    """Coerce user input to a finite Decimal or raise ValidationError."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Please enter a value for {field}.")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number, got {value!r}.") from None
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number.")
    return amount


def require_positive(value, field: str = "amount") -> Decimal:
    amount = to_amount(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than 0.")
    return amount


def require_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required.")
    return text


def require_category(category: Optional[str]) -> Optional[str]:
    if category is None or category in CATEGORIES:
        return category
    raise ValidationError(f"Unknown category {category!r}.")
