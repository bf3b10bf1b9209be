import asyncio

import pytest
from sqlalchemy import update

from conftest import ALICE
from ledgerbot.infrastructure.database.models import Account, Transaction
from ledgerbot.modules.ledger import AccountNotFoundError, TransactionSource


def test_replay_matches_after_mixed_operations(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", "EUR", balance=5000)
            await h.open("card", "EUR")
            t1 = await h.ledger.record_transaction(account_slug="cash", amount=-1250, currency="EUR", actor=ALICE)
            await h.ledger.record_transaction(
                account_slug="cash", amount=300, currency="EUR", source=TransactionSource.SYNC, actor=ALICE
            )
            await h.ledger.record_transfer(
                from_slug="cash",
                to_slug="card",
                from_amount=2000,
                to_amount=2000,
                from_currency="EUR",
                to_currency="EUR",
                actor=ALICE,
            )
            await h.ledger.cancel_transaction(t1, actor=ALICE)
            return await h.ledger.verify_integrity("cash"), await h.ledger.verify_integrity("card")

    cash, card = asyncio.run(scenario())
    assert cash.ok and card.ok
    assert cash.transactions_checked == 5
    assert cash.replayed_balance == cash.stored_balance == 5000 - 1250 + 300 - 2000 + 1250
    assert card.stored_balance == 2000


def test_detects_tampered_snapshot(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash")
            t1 = await h.ledger.record_transaction(account_slug="cash", amount=100, currency="EUR", actor=ALICE)
            t2 = await h.ledger.record_transaction(account_slug="cash", amount=100, currency="EUR", actor=ALICE)
            async with h.session_factory() as session:
                async with session.begin():
                    await session.execute(update(Transaction).where(Transaction.id == t2).values(balance_after=999))
            return t1, t2, await h.ledger.verify_integrity("cash")

    _, t2, report = asyncio.run(scenario())
    assert not report.ok
    assert report.mismatch.transaction_id == t2
    assert report.mismatch.expected == 200
    assert report.mismatch.actual == 999


def test_detects_drifted_account_balance(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", balance=100)
            async with h.session_factory() as session:
                async with session.begin():
                    await session.execute(update(Account).where(Account.slug == "cash").values(balance=150))
            return await h.ledger.verify_integrity("cash")

    report = asyncio.run(scenario())
    assert not report.ok
    assert report.mismatch.transaction_id is None
    assert report.mismatch.expected == 100
    assert report.mismatch.actual == 150


def test_unknown_account(harness):
    async def scenario():
        async with harness() as h:
            with pytest.raises(AccountNotFoundError):
                await h.ledger.verify_integrity("ghost")

    asyncio.run(scenario())
