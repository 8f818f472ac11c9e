"""
Currency and Date Display

One fixed convention: "." groups thousands and "," separates the two
fractional digits ("1.234,50"). There is no locale parameter.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union


Number = Union[int, float, Decimal]

_CENTS = Decimal("0.01")


def _to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, bool):
        raise ValueError(f"Not an amount: {amount!r}")
    if isinstance(amount, float):
        # repr gives the shortest string that round-trips, so 1.005 stays 1.005
        value = Decimal(repr(amount))
    else:
        value = Decimal(amount)
    if not value.is_finite():
        raise ValueError(f"Cannot format non-finite amount: {amount!r}")
    return value


def _group_thousands(digits: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return ".".join(groups)


def format_currency(amount: Number) -> str:
    """
    Format an amount as "<grouped-integer>,<2 digits>".

    Rounds half-up to cents first. The minus sign, if any, goes in front
    of the grouped integer; an amount that rounds to zero has no sign.

        >>> format_currency(1234.5)
        '1.234,50'
        >>> format_currency(-1234.5)
        '-1.234,50'
    """
    value = _to_decimal(amount)
    with localcontext() as ctx:
        # Integer digits plus a carry digit and the cents
        ctx.prec = max(28, value.adjusted() + 4)
        value = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
        integer_part, fraction = f"{abs(value):f}".split(".")
    formatted = f"{_group_thousands(integer_part)},{fraction}"
    return f"-{formatted}" if value < 0 else formatted


def parse_currency(text: str) -> Decimal:
    """
    Inverse of format_currency: "1.234,50" -> Decimal("1234.50").

    Raises:
        ValueError: If the text is not in the grouped format
    """
    cleaned = text.strip().replace(".", "").replace(",", ".")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Not a formatted amount: {text!r}")


def format_timestamp(timestamp: int) -> str:
    """Seconds since epoch as a local date and time."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
