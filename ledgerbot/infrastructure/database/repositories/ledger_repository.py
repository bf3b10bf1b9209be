"""SQLAlchemy implementation of the ledger unit-of-work repository"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerbot.infrastructure.database.models import Account, Transaction
from ledgerbot.modules.accounts.exceptions import AccountAlreadyExistsError


class SqlLedgerRepository:
    """Row access for one ledger unit. Locking reads use SELECT ... FOR UPDATE."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def lock_accounts(self, slugs: Sequence[str]) -> dict[str, Account]:
        # fixed lock order keeps two transfers over the same pair from deadlocking
        ordered = sorted(set(slugs))
        stmt = (
            select(Account)
            .where(Account.slug.in_(ordered))
            .order_by(Account.slug)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return {account.slug: account for account in result.scalars().all()}

    async def lock_transaction(self, transaction_id: int) -> Transaction | None:
        stmt = select(Transaction).where(Transaction.id == transaction_id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_account(self, *, name: str, slug: str, currency: str) -> Account:
        account = Account(name=name, slug=slug, currency=currency, balance=0)
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise AccountAlreadyExistsError(f"Account with slug '{slug}' already exists") from exc
        return account

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def get_transaction(self, transaction_id: int) -> Transaction | None:
        stmt = select(Transaction).where(Transaction.id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_transactions(
        self,
        *,
        account_slug: str | None = None,
        limit: int | None = None,
        newest_first: bool = True,
    ) -> Sequence[Transaction]:
        stmt = select(Transaction)
        if account_slug is not None:
            stmt = stmt.where(Transaction.account_slug == account_slug)
        stmt = stmt.order_by(desc(Transaction.id) if newest_first else Transaction.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_cancellable(self, actor_id: str, limit: int) -> Sequence[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.created_by_id == actor_id)
            .where(Transaction.source != "cancellation")
            .where(Transaction.cancelled_at.is_(None))
            .order_by(desc(Transaction.id))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def flush(self) -> None:
        await self.session.flush()
