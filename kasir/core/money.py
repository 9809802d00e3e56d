"""
Money arithmetic. All amounts are Decimals rounded half-up to the cent.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Convert a stored number (int, float, str) to an exact Decimal."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"'{value}' is not a valid amount")


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def discounted_unit_price(price: Decimal, discount_percent: Decimal) -> Decimal:
    """
    List price less a percent discount, to the cent.

    Examples:
        >>> discounted_unit_price(Decimal("5"), Decimal("0"))
        Decimal('5.00')
        >>> discounted_unit_price(Decimal("9.99"), Decimal("15"))
        Decimal('8.49')
    """
    return quantize_money(price * (1 - discount_percent / HUNDRED))
