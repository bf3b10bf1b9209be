"""Money parsing and display helpers.

Amounts are stored as integers in minor units (cents, kopiykas); users type
them in major units with either ``.`` or ``,`` as the decimal separator.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

MINOR_UNITS_PER_MAJOR = 100
DEFAULT_MAX_AMOUNT = 1_000_000

_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "UAH": "₴",
}


class AmountError(str, Enum):
    INVALID = "invalid"
    ZERO = "zero"
    NEGATIVE = "negative"
    MAX_DECIMALS = "max_decimals"
    MAX_AMOUNT = "max_amount"


@dataclass(frozen=True, slots=True)
class ParseOptions:
    allow_negative: bool = True
    allow_zero: bool = False
    max_amount: int = DEFAULT_MAX_AMOUNT  # major units


@dataclass(frozen=True, slots=True)
class ParsedAmount:
    value: int | None = None  # minor units
    error: AmountError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_amount(text: str, options: ParseOptions = ParseOptions()) -> ParsedAmount:
    """Parse user input like ``12,50`` or ``-5`` into minor units.

    Checks run in a fixed order so the first failing rule decides the error.
    """
    normalized = text.strip().replace(",", ".", 1)
    if not _NUMBER.match(normalized):
        return ParsedAmount(error=AmountError.INVALID)

    value = Decimal(normalized)
    if value == 0 and not options.allow_zero:
        return ParsedAmount(error=AmountError.ZERO)
    if value < 0 and not options.allow_negative:
        return ParsedAmount(error=AmountError.NEGATIVE)

    _, _, decimals = normalized.partition(".")
    if len(decimals) > 2:
        return ParsedAmount(error=AmountError.MAX_DECIMALS)
    if abs(value) > options.max_amount:
        return ParsedAmount(error=AmountError.MAX_AMOUNT)

    return ParsedAmount(value=to_minor_units(value))


def to_minor_units(amount: Decimal | int | str) -> int:
    minor = Decimal(amount) * MINOR_UNITS_PER_MAJOR
    return int(minor.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_major_units(amount: int) -> Decimal:
    return Decimal(amount) / MINOR_UNITS_PER_MAJOR


def _format_number(amount: int) -> str:
    return f"{abs(to_major_units(amount)):,.2f}"


def format_amount(amount: int, currency: str, show_sign: bool = True) -> str:
    """``+25.50 $`` / ``-1,234.56 €``"""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    if show_sign:
        sign = "+" if amount >= 0 else "-"
    else:
        sign = "-" if amount < 0 else ""
    return f"{sign}{_format_number(amount)} {symbol}"
