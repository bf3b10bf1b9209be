"""Currency conversion in front of an external rate provider."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .models import Conversion, RateProvider

logger = logging.getLogger(__name__)

SAME_CURRENCY_RATE = Decimal(1)


class CurrencyConverter:
    """Converts minor-unit amounts between currencies.

    ``convert`` returns ``None`` when no rate is available; callers treat
    that as "ask for the received amount manually".
    """

    def __init__(self, provider: RateProvider) -> None:
        self._provider = provider

    async def convert(self, amount: int, from_currency: str, to_currency: str) -> Optional[Conversion]:
        if from_currency == to_currency:
            return Conversion(amount=amount, rate=SAME_CURRENCY_RATE)

        rate = await self._provider.get_rate(from_currency, to_currency)
        if rate is None:
            logger.warning("No exchange rate for %s -> %s", from_currency, to_currency)
            return None

        converted = (Decimal(amount) * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return Conversion(amount=int(converted), rate=rate)


def format_exchange_rate(rate: Decimal, from_currency: str, to_currency: str) -> str:
    """``1 EUR = 1.105 USD``"""
    formatted = f"{rate:.4f}".rstrip("0").rstrip(".")
    return f"1 {from_currency} = {formatted} {to_currency}"
