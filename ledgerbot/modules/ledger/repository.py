"""Repository protocol for the ledger unit of work."""

from __future__ import annotations

from typing import Protocol, Sequence

from ledgerbot.infrastructure.database.models import Account as AccountModel, Transaction as TransactionModel


class LedgerRepository(Protocol):
    async def lock_accounts(self, slugs: Sequence[str]) -> dict[str, AccountModel]:
        ...

    async def lock_transaction(self, transaction_id: int) -> TransactionModel | None:
        ...

    async def create_account(self, *, name: str, slug: str, currency: str) -> AccountModel:
        ...

    async def add_transaction(self, transaction: TransactionModel) -> TransactionModel:
        ...

    async def get_transaction(self, transaction_id: int) -> TransactionModel | None:
        ...

    async def list_transactions(
        self,
        *,
        account_slug: str | None = None,
        limit: int | None = None,
        newest_first: bool = True,
    ) -> Sequence[TransactionModel]:
        ...

    async def list_cancellable(self, actor_id: str, limit: int) -> Sequence[TransactionModel]:
        ...

    async def flush(self) -> None:
        ...
