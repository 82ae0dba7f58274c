"""CLI utilities: formatting."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal


def fmt_price(v) -> str:
    """Format a unit price for display with two decimals (e.g. 1,234.50)."""
    d = Decimal(str(v)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{d:,.2f}"


def fmt_date(v: datetime) -> str:
    """Calendar date part of a timestamp (YYYY-MM-DD)."""
    return v.strftime("%Y-%m-%d")


def fmt_timestamp(v: datetime) -> str:
    return v.strftime("%Y-%m-%d %H:%M")
