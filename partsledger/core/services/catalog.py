"""Part catalog field rules."""

import math

from partsledger.core.exceptions import ValidationError


def clean_text(value: str | None) -> str | None:
    """Strip a text field; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_part_fields(
    code: str | None,
    name: str | None,
    price: float,
) -> tuple[str, str]:
    """
    Check the identifying fields of a part and return them stripped.

    Raises:
        ValidationError: blank code or name, negative or non-finite price
    """
    code = clean_text(code)
    name = clean_text(name)
    if not code:
        raise ValidationError("code", "part code is required", code)
    if not name:
        raise ValidationError("name", "part name is required", name)
    if not math.isfinite(price):
        raise ValidationError("price", "must be a finite number", price)
    if price < 0:
        raise ValidationError("price", "must be 0 or more", price)
    return code, name


def validate_opening_stock(stock: object) -> int:
    if isinstance(stock, bool) or not isinstance(stock, int):
        raise ValidationError("stock", "must be an integer", stock)
    if stock < 0:
        raise ValidationError("stock", "must be 0 or more", stock)
    return stock
