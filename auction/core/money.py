"""
Conversion between user-typed prices and integer minor units.
"""

import re
from typing import Union

from auction.core.config import settings
from auction.core.exceptions import InvalidInputError

PRICE_PATTERN = re.compile(r"^\d+(?:\.\d{1,2})?$")

# Largest value a BIGINT column holds
MAX_CENTS = 2**63 - 1


class MoneyError(InvalidInputError, ValueError):
    code = "INVALID_AMOUNT"


def parse_money_to_cents(raw: str) -> int:
    """
    Parse an amount typed as ``10``, ``10.5`` or ``10.55`` into cents.

    Raises:
        MoneyError: if the text is not in ``0.00`` format or overflows.
    """
    text = raw.strip()
    if not PRICE_PATTERN.match(text):
        raise MoneyError("Amount must match 0.00 format", value=raw)

    major, _, minor = text.partition(".")
    cents = int(major) * 100 + int(minor.ljust(2, "0"))
    if cents > MAX_CENTS:
        raise MoneyError("Amount exceeds supported range", value=raw)
    return cents


def coerce_amount(value: Union[int, str]) -> int:
    """Accept either integer minor units or a ``0.00`` formatted string."""
    if isinstance(value, bool):
        raise MoneyError("Amount must be an integer or a 0.00 string", value=value)
    if isinstance(value, int):
        if value > MAX_CENTS:
            raise MoneyError("Amount exceeds supported range", value=value)
        return value
    return parse_money_to_cents(value)


def format_cents(amount: int) -> str:
    sign = "-" if amount < 0 else ""
    major, minor = divmod(abs(amount), 100)
    return f"{settings.CURRENCY_LABEL} {sign}{major}.{minor:02d}"
