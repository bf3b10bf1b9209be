"""Repository protocol for accounts."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence."""

    async def get_by_slug(self, slug: str) -> Account | None:
        ...

    async def list_accounts(self) -> Sequence[Account]:
        ...
