"""Domain models for accounts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .exceptions import InvalidAccountError

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
MIN_SLUG_LENGTH = 2
MAX_SLUG_LENGTH = 50
MAX_NAME_LENGTH = 50


@dataclass(slots=True)
class Account:
    id: str
    name: str
    slug: str
    currency: str
    balance: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class AccountCreateInput:
    name: str
    slug: str
    currency: str
    # minor units; recorded as an opening sync transaction when non-zero
    opening_balance: int = 0

    def normalized(self) -> "AccountCreateInput":
        name = self.name.strip()
        slug = self.slug.strip().lower()
        currency = self.currency.strip().upper()

        if not name:
            raise InvalidAccountError("Name cannot be empty")
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidAccountError(f"Name must be at most {MAX_NAME_LENGTH} characters")
        if not MIN_SLUG_LENGTH <= len(slug) <= MAX_SLUG_LENGTH:
            raise InvalidAccountError(
                f"Slug must be between {MIN_SLUG_LENGTH} and {MAX_SLUG_LENGTH} characters"
            )
        if not SLUG_PATTERN.match(slug):
            raise InvalidAccountError(
                "Slug must be lowercase letters, numbers, and hyphens only (no leading/trailing hyphens)"
            )
        if not CURRENCY_PATTERN.match(currency):
            raise InvalidAccountError("Currency must be a three-letter ISO 4217 code")

        return AccountCreateInput(
            name=name,
            slug=slug,
            currency=currency,
            opening_balance=self.opening_balance,
        )
