"""Ledger engine: the only writer of balances and transactions.

Every mutating operation runs as one unit of work: the touched account
and transaction rows are read under lock, derived fields such as
``balance_after`` are computed from what was read, and all writes commit
together. Any exception raised inside the unit rolls the whole unit back.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledgerbot.infrastructure.database.models import Account as AccountModel, Transaction as TransactionModel
from ledgerbot.infrastructure.database.repositories.ledger_repository import SqlLedgerRepository
from ledgerbot.modules.accounts.exceptions import AccountAlreadyExistsError
from ledgerbot.modules.accounts.models import Account, AccountCreateInput

from .exceptions import (
    AccountNotFoundError,
    AlreadyCancelledError,
    InvalidCancellationTargetError,
    NotATransferError,
    SameAccountTransferError,
    TransactionNotFoundError,
)
from .models import (
    Actor,
    IntegrityMismatch,
    IntegrityReport,
    TransactionRecord,
    TransactionSource,
    TransferIds,
    TransferType,
)
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

OPENING_BALANCE_DESCRIPTION = "Opening balance"

# sources that record_transaction may write; transfers and reversals have
# their own operations because they carry linking fields
_DIRECT_SOURCES = {
    TransactionSource.MANUAL: True,
    TransactionSource.SYNC: True,
    TransactionSource.TRANSFER: False,
    TransactionSource.CANCELLATION: False,
}


def _require_minor_units(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be an integer number of minor units, got {amount!r}")
    return amount


@dataclass(slots=True)
class LedgerService:
    session_factory: async_sessionmaker[AsyncSession]
    repository_factory: Callable[[AsyncSession], LedgerRepository] = SqlLedgerRepository

    @asynccontextmanager
    async def _unit(self) -> AsyncIterator[LedgerRepository]:
        async with self.session_factory() as session:
            async with session.begin():
                yield self.repository_factory(session)

    async def record_transaction(
        self,
        *,
        account_slug: str,
        amount: int,
        currency: str,
        actor: Actor,
        source: TransactionSource = TransactionSource.MANUAL,
        description: Optional[str] = None,
    ) -> int:
        _require_minor_units(amount)
        source = TransactionSource(source)
        if not _DIRECT_SOURCES[source]:
            raise ValueError(f"record_transaction cannot write {source.value} transactions")

        async with self._unit() as repo:
            accounts = await repo.lock_accounts([account_slug])
            account = accounts.get(account_slug)
            if account is None:
                raise AccountNotFoundError(account_slug)

            txn = await self._append(
                repo,
                account,
                amount=amount,
                currency=currency,
                description=description,
                source=source,
                actor=actor,
            )
            transaction_id = txn.id
            balance_after = txn.balance_after

        logger.info(
            "Recorded %s transaction %s on %s: %+d -> %d",
            source.value,
            transaction_id,
            account_slug,
            amount,
            balance_after,
        )
        return transaction_id

    async def record_transfer(
        self,
        *,
        from_slug: str,
        to_slug: str,
        from_amount: int,
        to_amount: int,
        from_currency: str,
        to_currency: str,
        actor: Actor,
        description: Optional[str] = None,
    ) -> TransferIds:
        outgoing_amount = -abs(_require_minor_units(from_amount))
        incoming_amount = abs(_require_minor_units(to_amount))
        if from_slug == to_slug:
            raise SameAccountTransferError(f"Cannot transfer from {from_slug} to itself")

        async with self._unit() as repo:
            accounts = await repo.lock_accounts([from_slug, to_slug])
            for slug in (from_slug, to_slug):
                if slug not in accounts:
                    raise AccountNotFoundError(slug)

            outgoing = await self._append(
                repo,
                accounts[from_slug],
                amount=outgoing_amount,
                currency=from_currency,
                description=description,
                source=TransactionSource.TRANSFER,
                actor=actor,
                transfer_type=TransferType.OUTGOING,
            )
            incoming = await self._append(
                repo,
                accounts[to_slug],
                amount=incoming_amount,
                currency=to_currency,
                description=description,
                source=TransactionSource.TRANSFER,
                actor=actor,
                transfer_type=TransferType.INCOMING,
                linked_transaction_id=outgoing.id,
            )
            outgoing.linked_transaction_id = incoming.id
            await repo.flush()
            ids = TransferIds(outgoing_id=outgoing.id, incoming_id=incoming.id)

        logger.info(
            "Recorded transfer %s -> %s (%d %s -> %d %s) as %s/%s",
            from_slug,
            to_slug,
            -outgoing_amount,
            from_currency,
            incoming_amount,
            to_currency,
            ids.outgoing_id,
            ids.incoming_id,
        )
        return ids

    async def cancel_transaction(self, original_id: int, *, actor: Actor) -> int:
        async with self._unit() as repo:
            original = await repo.lock_transaction(original_id)
            if original is None:
                raise TransactionNotFoundError(original_id)
            if original.cancelled_at is not None:
                raise AlreadyCancelledError(original_id)
            if original.source == TransactionSource.CANCELLATION.value:
                raise InvalidCancellationTargetError(f"Transaction {original_id} is itself a cancellation")

            accounts = await repo.lock_accounts([original.account_slug])
            account = accounts.get(original.account_slug)
            if account is None:
                raise AccountNotFoundError(original.account_slug)

            reversal = await self._append(
                repo,
                account,
                amount=-original.amount,
                currency=original.currency,
                description=original.description,
                source=TransactionSource.CANCELLATION,
                actor=actor,
                cancelled_transaction_id=original.id,
            )
            self._mark_cancelled(original, reversal)
            await repo.flush()
            reversal_id = reversal.id

        logger.info("Cancelled transaction %s with reversal %s", original_id, reversal_id)
        return reversal_id

    async def cancel_transfer(self, leg_id: int, *, actor: Actor) -> TransferIds:
        async with self._unit() as repo:
            leg = await repo.lock_transaction(leg_id)
            if leg is None:
                raise TransactionNotFoundError(leg_id)
            if leg.cancelled_at is not None:
                raise AlreadyCancelledError(leg_id)
            if leg.source != TransactionSource.TRANSFER.value or leg.linked_transaction_id is None:
                raise NotATransferError(f"Transaction {leg_id} is not a transfer leg")

            linked = await repo.lock_transaction(leg.linked_transaction_id)
            if linked is None:
                raise TransactionNotFoundError(leg.linked_transaction_id)
            if linked.cancelled_at is not None:
                raise AlreadyCancelledError(linked.id)

            if leg.transfer_type == TransferType.INCOMING.value:
                outgoing, incoming = linked, leg
            else:
                outgoing, incoming = leg, linked

            accounts = await repo.lock_accounts([outgoing.account_slug, incoming.account_slug])
            for slug in (outgoing.account_slug, incoming.account_slug):
                if slug not in accounts:
                    raise AccountNotFoundError(slug)

            reversal_out = await self._append(
                repo,
                accounts[outgoing.account_slug],
                amount=-outgoing.amount,
                currency=outgoing.currency,
                description=outgoing.description,
                source=TransactionSource.CANCELLATION,
                actor=actor,
                transfer_type=TransferType.OUTGOING,
                cancelled_transaction_id=outgoing.id,
            )
            reversal_in = await self._append(
                repo,
                accounts[incoming.account_slug],
                amount=-incoming.amount,
                currency=incoming.currency,
                description=incoming.description,
                source=TransactionSource.CANCELLATION,
                actor=actor,
                transfer_type=TransferType.INCOMING,
                cancelled_transaction_id=incoming.id,
                linked_transaction_id=reversal_out.id,
            )
            reversal_out.linked_transaction_id = reversal_in.id
            self._mark_cancelled(outgoing, reversal_out)
            self._mark_cancelled(incoming, reversal_in)
            await repo.flush()
            ids = TransferIds(outgoing_id=reversal_out.id, incoming_id=reversal_in.id)

        logger.info(
            "Cancelled transfer %s/%s with reversals %s/%s",
            outgoing.id,
            incoming.id,
            ids.outgoing_id,
            ids.incoming_id,
        )
        return ids

    async def open_account(self, payload: AccountCreateInput, *, actor: Actor) -> Account:
        """Create an account; a non-zero opening balance is booked as a sync entry."""
        payload = payload.normalized()
        _require_minor_units(payload.opening_balance)

        async with self._unit() as repo:
            existing = await repo.lock_accounts([payload.slug])
            if existing:
                raise AccountAlreadyExistsError(f"Account with slug '{payload.slug}' already exists")

            account = await repo.create_account(
                name=payload.name,
                slug=payload.slug,
                currency=payload.currency,
            )
            if payload.opening_balance:
                await self._append(
                    repo,
                    account,
                    amount=payload.opening_balance,
                    currency=account.currency,
                    description=OPENING_BALANCE_DESCRIPTION,
                    source=TransactionSource.SYNC,
                    actor=actor,
                )
            created = Account(
                id=str(account.id),
                name=account.name,
                slug=account.slug,
                currency=account.currency,
                balance=account.balance,
                created_at=account.created_at,
            )

        logger.info("Opened account %s (%s) with balance %d", created.slug, created.currency, created.balance)
        return created

    async def verify_integrity(self, account_slug: str) -> IntegrityReport:
        """Replay an account's transactions and compare against stored snapshots."""
        async with self._unit() as repo:
            accounts = await repo.lock_accounts([account_slug])
            account = accounts.get(account_slug)
            if account is None:
                raise AccountNotFoundError(account_slug)
            stored_balance = account.balance
            rows = await repo.list_transactions(account_slug=account_slug, newest_first=False)

        running = 0
        mismatch: IntegrityMismatch | None = None
        for row in rows:
            running += row.amount
            if mismatch is None and row.balance_after != running:
                mismatch = IntegrityMismatch(transaction_id=row.id, expected=running, actual=row.balance_after)
        if mismatch is None and running != stored_balance:
            mismatch = IntegrityMismatch(transaction_id=None, expected=running, actual=stored_balance)

        report = IntegrityReport(
            account_slug=account_slug,
            transactions_checked=len(rows),
            replayed_balance=running,
            stored_balance=stored_balance,
            mismatch=mismatch,
        )
        if mismatch is not None:
            logger.warning(
                "Integrity check failed for %s at transaction %s: expected %d, found %d",
                account_slug,
                mismatch.transaction_id,
                mismatch.expected,
                mismatch.actual,
            )
        return report

    async def get_transaction(self, transaction_id: int) -> TransactionRecord | None:
        async with self._unit() as repo:
            row = await repo.get_transaction(transaction_id)
            return self._to_record(row) if row else None

    async def list_transactions(
        self,
        *,
        account_slug: str | None = None,
        limit: int = 20,
    ) -> list[TransactionRecord]:
        async with self._unit() as repo:
            rows = await repo.list_transactions(account_slug=account_slug, limit=limit)
            return [self._to_record(row) for row in rows]

    async def list_cancellable(self, actor_id: str, limit: int) -> list[TransactionRecord]:
        """Newest-first transactions the actor authored that can still be cancelled."""
        async with self._unit() as repo:
            rows = await repo.list_cancellable(actor_id, limit)
            return [self._to_record(row) for row in rows]

    @staticmethod
    async def _append(
        repo: LedgerRepository,
        account: AccountModel,
        *,
        amount: int,
        currency: str,
        description: Optional[str],
        source: TransactionSource,
        actor: Actor,
        transfer_type: TransferType | None = None,
        linked_transaction_id: int | None = None,
        cancelled_transaction_id: int | None = None,
    ) -> TransactionModel:
        balance_after = account.balance + amount
        txn = TransactionModel(
            account_slug=account.slug,
            amount=amount,
            currency=currency,
            description=description,
            source=source.value,
            balance_after=balance_after,
            created_by_id=actor.id,
            created_by_name=actor.name,
            transfer_type=transfer_type.value if transfer_type else None,
            linked_transaction_id=linked_transaction_id,
            cancelled_transaction_id=cancelled_transaction_id,
        )
        account.balance = balance_after
        return await repo.add_transaction(txn)

    @staticmethod
    def _mark_cancelled(original: TransactionModel, reversal: TransactionModel) -> None:
        original.cancelled_at = datetime.now(timezone.utc)
        original.cancelled_by_txn_id = reversal.id

    @staticmethod
    def _to_record(model: TransactionModel) -> TransactionRecord:
        return TransactionRecord(
            id=model.id,
            account_slug=model.account_slug,
            amount=model.amount,
            currency=model.currency,
            description=model.description,
            source=TransactionSource(model.source),
            balance_after=model.balance_after,
            created_by=Actor(id=model.created_by_id, name=model.created_by_name),
            created_at=model.created_at,
            linked_transaction_id=model.linked_transaction_id,
            transfer_type=TransferType(model.transfer_type) if model.transfer_type else None,
            cancelled_transaction_id=model.cancelled_transaction_id,
            cancelled_at=model.cancelled_at,
            cancelled_by_txn_id=model.cancelled_by_txn_id,
        )


