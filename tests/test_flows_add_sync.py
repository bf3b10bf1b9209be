import asyncio

from conftest import event
from ledgerbot.modules.flows import Aborted, Advance, Completed, FlowDependencies, Reprompt, StepError
from ledgerbot.modules.ledger import TransactionSource
from ledgerbot.modules.ledger.service import LedgerService
from ledgerbot.modules.sessions import AddStep, FlowKind, SyncStep


def test_add_flow_records_manual_transaction(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", "EUR")
            d = h.dispatcher
            results = [
                await d.start_flow(event(artifacts=["m1"]), FlowKind.ADD),
                await d.handle_input(event(text="ghost")),
                await d.handle_input(event(text="cash", artifacts=["m2"])),
                await d.handle_input(event(text="0")),
                await d.handle_input(event(text="-12,50")),
                await d.handle_input(event(text="groceries for the week", artifacts=["m3"])),
            ]
            record = await h.ledger.get_transaction(results[-1].transaction_ids[0])
            session = await h.store.scoped(event().key).load()
            return results, record, await h.balance("cash"), session, h.cleaner.removed_ids

    results, record, balance, session, removed = asyncio.run(scenario())
    start, unknown, selected, zero, amount, done = results

    assert isinstance(start, Advance) and start.step == AddStep.SELECT_ACCOUNT.value
    assert [a["slug"] for a in start.payload["accounts"]] == ["cash"]
    assert unknown == Reprompt(FlowKind.ADD, AddStep.SELECT_ACCOUNT.value, StepError.ACCOUNT_NOT_FOUND)
    assert isinstance(selected, Advance) and selected.step == AddStep.AMOUNT.value
    assert zero.error is StepError.ZERO
    assert isinstance(amount, Advance) and amount.payload == {"amount": -1250}

    assert isinstance(done, Completed)
    assert done.payload["description"] == "Groceries for the week"
    assert done.payload["account"]["balance"] == -1250
    assert record.source is TransactionSource.MANUAL
    assert record.created_by.name == "Alice"
    assert balance == -1250
    assert session is None
    assert removed == ["m1", "m2", "m3"]


def test_add_flow_skip_and_truncate_description(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash")
            d = h.dispatcher
            outcomes = []
            for text in ("-", "x" * 150):
                await d.start_flow(event(), FlowKind.ADD)
                await d.handle_input(event(text="cash"))
                await d.handle_input(event(text="5"))
                outcomes.append(await d.handle_input(event(text=text)))
            return outcomes

    skipped, long = asyncio.run(scenario())
    assert skipped.payload["description"] is None
    assert long.payload["description"] == "X" + "x" * 99


def test_add_flow_aborts_when_account_disappears(harness, monkeypatch):
    async def scenario():
        async with harness() as h:
            await h.open("cash")
            d = h.dispatcher
            await d.start_flow(event(), FlowKind.ADD)
            await d.handle_input(event(text="cash"))
            await d.handle_input(event(text="5"))

            async def vanished(self, slug):
                return None

            monkeypatch.setattr(FlowDependencies, "find_account", vanished)
            result = await d.handle_input(event(text="lunch"))
            return result, await h.store.scoped(event().key).load(), await h.balance("cash")

    result, session, balance = asyncio.run(scenario())
    assert result == Aborted(FlowKind.ADD, StepError.ACCOUNT_NOT_FOUND)
    assert session is None
    assert balance == 0


def test_add_flow_ledger_failure_aborts(harness, monkeypatch):
    async def scenario():
        async with harness() as h:
            await h.open("cash")
            d = h.dispatcher
            await d.start_flow(event(), FlowKind.ADD)
            await d.handle_input(event(text="cash"))
            await d.handle_input(event(text="5"))

            async def broken(self, **kwargs):
                raise RuntimeError("database is locked")

            monkeypatch.setattr(LedgerService, "record_transaction", broken)
            result = await d.handle_input(event(text="lunch"))
            return result, await h.store.scoped(event().key).load()

    result, session = asyncio.run(scenario())
    assert result == Aborted(FlowKind.ADD, StepError.FAILED)
    assert session is None


def test_add_needs_an_account(harness):
    async def scenario():
        async with harness() as h:
            return await h.dispatcher.start_flow(event(), FlowKind.ADD), await h.store.scoped(event().key).load()

    result, session = asyncio.run(scenario())
    assert result == Aborted(FlowKind.ADD, StepError.NO_ACCOUNTS)
    assert session is None


def test_sync_flow_books_difference(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", balance=10000)
            d = h.dispatcher
            started = await d.start_flow(event(), FlowKind.SYNC)
            selected = await d.handle_input(event(text="cash"))
            negative = await d.handle_input(event(text="-5"))
            done = await d.handle_input(event(text="150"))
            record = await h.ledger.get_transaction(done.transaction_ids[0])
            return started, selected, negative, done, record, await h.balance("cash")

    started, selected, negative, done, record, balance = asyncio.run(scenario())
    assert started.step == SyncStep.SELECT_ACCOUNT.value
    assert selected.step == SyncStep.SYNC_AMOUNT.value
    assert selected.payload["current_balance"] == 10000
    assert negative.error is StepError.NEGATIVE
    assert isinstance(done, Completed) and not done.noop
    assert done.payload["delta"] == 5000
    assert record.source is TransactionSource.SYNC
    assert record.amount == 5000
    assert record.description is None
    assert balance == 15000


def test_sync_flow_matching_balance_is_noop(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", balance=2500)
            d = h.dispatcher
            await d.start_flow(event(), FlowKind.SYNC)
            await d.handle_input(event(text="cash"))
            done = await d.handle_input(event(text="25"))
            return done, await h.ledger.list_transactions(account_slug="cash")

    done, history = asyncio.run(scenario())
    assert done.noop
    assert done.transaction_ids == ()
    assert len(history) == 1


def test_sync_flow_accepts_zero(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", balance=700)
            d = h.dispatcher
            await d.start_flow(event(), FlowKind.SYNC)
            await d.handle_input(event(text="cash"))
            done = await d.handle_input(event(text="0"))
            return done, await h.balance("cash"), await h.ledger.verify_integrity("cash")

    done, balance, report = asyncio.run(scenario())
    assert done.payload["delta"] == -700
    assert balance == 0
    assert report.ok


def test_sync_prompt_shows_unsigned_balance(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", "EUR", balance=123456)
            d = h.dispatcher
            await d.start_flow(event(), FlowKind.SYNC)
            return await d.handle_input(event(text="cash"))

    selected = asyncio.run(scenario())
    assert selected.payload["account"]["balance_display"] == "1,234.56 €"
