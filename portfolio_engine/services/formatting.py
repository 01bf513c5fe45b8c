# portfolio_engine/services/formatting.py
"""
Display formatting for engine results.

Engine values are never rounded; rounding happens only here, at the
presentation boundary.

Precision policy:
    Quantities:   >= 1 → 4 decimals, >= 0.001 → 6 decimals, else 8
    Currency:     always 2 decimals, e.g. "$1,234.50" / "-$12.00"
    Percentages:  always 2 decimals, "+" for non-negative values
    Chart prices: >= 100 → 2, >= 1 → 4, >= 0.01 → 6, else 8 decimals
"""

from decimal import ROUND_HALF_UP, Decimal

from portfolio_engine.services.constants import (
    CURRENCY_DISPLAY_PLACES,
    PERCENT_DISPLAY_PLACES,
)


def _quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def quantity_places(value: Decimal) -> int:
    """Number of decimals a quantity is displayed with."""
    if value >= Decimal("1"):
        return 4
    if value >= Decimal("0.001"):
        return 6
    return 8


def format_quantity(value: Decimal) -> str:
    """
    Format an asset quantity.

    Examples:
        >>> format_quantity(Decimal("1.5"))
        '1.5000'
        >>> format_quantity(Decimal("0.00012345678"))
        '0.00012346'
    """
    return f"{_quantize(value, quantity_places(value)):f}"


def format_currency(value: Decimal, symbol: str = "$") -> str:
    """
    Format a quote-currency amount with thousands separators.

    Examples:
        >>> format_currency(Decimal("1234.5"))
        '$1,234.50'
        >>> format_currency(Decimal("-12"))
        '-$12.00'
    """
    amount = _quantize(value, CURRENCY_DISPLAY_PLACES)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{CURRENCY_DISPLAY_PLACES}f}"


def format_percent(value: Decimal, signed: bool = True) -> str:
    """
    Format a percentage.

    Examples:
        >>> format_percent(Decimal("26.666"))
        '+26.67%'
        >>> format_percent(Decimal("-3.5"), signed=False)
        '-3.50%'
    """
    prefix = "+" if signed and value >= 0 else ""
    return f"{prefix}{_quantize(value, PERCENT_DISPLAY_PLACES):f}%"


def price_precision(min_price: Decimal) -> int:
    """Decimals needed to chart prices whose minimum is min_price."""
    if min_price >= Decimal("100"):
        return 2
    if min_price >= Decimal("1"):
        return 4
    if min_price >= Decimal("0.01"):
        return 6
    return 8
