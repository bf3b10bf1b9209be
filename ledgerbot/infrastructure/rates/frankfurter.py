"""Exchange rates from the Frankfurter API (ECB reference rates)."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class FrankfurterRateProvider:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def get_rate(self, base: str, target: str) -> Optional[Decimal]:
        if base == target:
            return Decimal(1)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self._base_url}/latest",
                    params={"base": base, "symbols": target},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Frankfurter API error %s for %s -> %s", exc.response.status_code, base, target)
            return None
        except (httpx.TimeoutException, httpx.RequestError) as exc:
            logger.error("Failed to fetch exchange rate %s -> %s: %s", base, target, exc)
            return None
        except ValueError as exc:
            logger.error("Invalid exchange rate payload for %s -> %s: %s", base, target, exc)
            return None

        raw_rate = (data.get("rates") or {}).get(target) if isinstance(data, dict) else None
        if raw_rate is None:
            logger.error("Exchange rate %s -> %s not found in response", base, target)
            return None
        try:
            rate = Decimal(str(raw_rate))
        except InvalidOperation:
            logger.error("Unparseable exchange rate %r for %s -> %s", raw_rate, base, target)
            return None
        if not rate.is_finite() or rate <= 0:
            logger.error("Rejected exchange rate %s for %s -> %s", rate, base, target)
            return None

        logger.info("Exchange rate fetched: 1 %s = %s %s (%s)", base, rate, target, data.get("date"))
        return rate


class UnavailableRateProvider:
    """Provider used when rate lookups are disabled; every pair needs manual entry."""

    async def get_rate(self, base: str, target: str) -> Optional[Decimal]:
        if base == target:
            return Decimal(1)
        return None
