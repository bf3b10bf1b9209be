"""Currency conversion and money formatting."""

from .models import Conversion, RateProvider
from .money import AmountError, ParsedAmount, ParseOptions, format_amount, parse_amount, to_minor_units
from .service import CurrencyConverter, format_exchange_rate

__all__ = [
    "AmountError",
    "Conversion",
    "CurrencyConverter",
    "ParseOptions",
    "ParsedAmount",
    "RateProvider",
    "format_amount",
    "format_exchange_rate",
    "parse_amount",
    "to_minor_units",
]
