"""Domain models for currency conversion."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol


@dataclass(frozen=True, slots=True)
class Conversion:
    amount: int  # minor units in the target currency
    rate: Decimal


class RateProvider(Protocol):
    """Source of exchange rates: 1 ``base`` = rate ``target``.

    Implementations return ``None`` when no rate can be obtained and never raise.
    """

    async def get_rate(self, base: str, target: str) -> Optional[Decimal]:
        ...
