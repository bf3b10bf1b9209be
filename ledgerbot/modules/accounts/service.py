"""Read-side services for accounts."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ledgerbot.infrastructure.database.repositories.account_repository import SqlAccountRepository

from .exceptions import AccountNotFoundError
from .models import Account
from .repository import AccountRepository


class AccountService:
    """Account lookups. Balances are only ever written by the ledger."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session))

    async def find(self, slug: str) -> Account | None:
        return await self._repository.get_by_slug(slug)

    async def get(self, slug: str) -> Account:
        account = await self._repository.get_by_slug(slug)
        if account is None:
            raise AccountNotFoundError(slug)
        return account

    async def list_accounts(self) -> Sequence[Account]:
        accounts = await self._repository.list_accounts()
        return sorted(accounts, key=lambda account: account.name.casefold())
