from __future__ import annotations

from decimal import Decimal


def format_amount(value: Decimal, exponent: int = 2, *, grouping: bool = False) -> str:
    """Render ``value`` with exactly ``exponent`` decimal places."""
    spec = f",.{exponent}f" if grouping else f".{exponent}f"
    return format(value, spec)


def format_currency(value: Decimal, symbol: str, exponent: int = 2) -> str:
    rendered = format_amount(abs(value), exponent, grouping=True)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{rendered}"
