"""
Parsing -- boundary conversion of caller-supplied batch attributes.

Responsibility:
    Turn loosely typed input (CLI strings, JSON numbers, Python values)
    into the exact types the ledger stores: ``int`` quantities, ``Decimal``
    prices and timezone-aware UTC ``datetime`` expiry dates.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Failure modes:
    - InvalidQuantityError for bools, non-integers and values <= 0.
    - InvalidPriceError for non-numeric, non-finite, zero or negative prices.
    - InvalidTimestampError for anything that is not a date, datetime or
      ISO-8601 string.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation

from stock_kernel.exceptions import (
    InvalidPriceError,
    InvalidQuantityError,
    InvalidTimestampError,
)


def parse_quantity(value: object, field: str = "quantity") -> int:
    """Return ``value`` as a positive int or raise InvalidQuantityError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError(field, value, "must be a whole number")
    if value <= 0:
        raise InvalidQuantityError(field, value)
    return value


def parse_unit_price(value: object) -> Decimal:
    """
    Return ``value`` as a positive Decimal.

    Floats go through ``str`` first so ``12.5`` becomes ``Decimal("12.5")``
    rather than its binary expansion.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidPriceError(value, "must be a number")
    if isinstance(value, float):
        value = str(value)
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidPriceError(value, "must be a number") from None
    if not price.is_finite():
        raise InvalidPriceError(value, "must be finite")
    if price <= 0:
        raise InvalidPriceError(value)
    return price


def parse_expiry_date(value: object) -> datetime:
    """
    Return ``value`` as a timezone-aware UTC datetime.

    Accepts a ``datetime`` (naive values are taken as UTC), a ``date``
    (midnight UTC of that day) or an ISO-8601 string of either form.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidTimestampError(value) from None
    else:
        raise InvalidTimestampError(value)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
