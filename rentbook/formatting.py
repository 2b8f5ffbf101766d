"""
Display formatting for money and shares.

Amounts are shown in whole currency units with thousands separators,
e.g. ₦1,250,000. Fractional units are rounded half-up.
"""

from decimal import Decimal
from typing import Union

from rentbook.calculations.aggregation import round_currency

DEFAULT_CURRENCY_SYMBOL = "₦"


def format_currency(
    amount: Union[Decimal, int, str],
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> str:
    """Format an amount as zero-decimal currency."""
    rounded = round_currency(Decimal(str(amount)))
    if rounded == 0:
        return f"{symbol}0"
    if rounded < 0:
        return f"-{symbol}{-rounded:,.0f}"
    return f"{symbol}{rounded:,.0f}"


def format_share(percentage: Union[Decimal, int, str]) -> str:
    """Format a share percentage, dropping trailing zeros ("50%", "33.5%")."""
    value = Decimal(str(percentage)).normalize()
    if value == value.to_integral_value():
        value = value.quantize(Decimal("1"))
    return f"{value}%"
