import asyncio
from decimal import Decimal

from conftest import event
from ledgerbot.modules.flows import Aborted, Advance, Completed, Reprompt, StepError
from ledgerbot.modules.sessions import FlowKind, TransferSession, TransferStep

EUR_USD = {("EUR", "USD"): Decimal("1.105")}


async def _to_amount_step(h, source="cash", destination="card"):
    d = h.dispatcher
    await d.start_flow(event(), FlowKind.TRANSFER)
    await d.handle_input(event(text=source))
    return await d.handle_input(event(text=destination))


def test_cross_currency_transfer_with_accepted_rate(harness):
    async def scenario():
        async with harness(rates=EUR_USD) as h:
            await h.open("cash", "EUR", balance=20000, name="Cash")
            await h.open("card", "USD", name="Card")
            await h.open("bank", "USD", name="Bank")
            d = h.dispatcher
            started = await d.start_flow(event(), FlowKind.TRANSFER)
            source = await d.handle_input(event(text="cash"))
            same = await d.handle_input(event(text="cash"))
            destination = await d.handle_input(event(text="card"))
            offer = await d.handle_input(event(text="10,50"))
            bogus = await d.handle_input(event(text="maybe"))
            stored = await h.store.scoped(event().key).load()
            accepted = await d.handle_input(event(text="accept"))
            done = await d.handle_input(event(text="rent"))
            return (
                [started, source, same, destination, offer, bogus, accepted, done],
                stored,
                await h.balance("cash"),
                await h.balance("card"),
            )

    results, stored, cash, card = asyncio.run(scenario())
    started, source, same, destination, offer, bogus, accepted, done = results

    assert [a["slug"] for a in started.payload["accounts"]] == ["bank", "card", "cash"]
    assert source.step == TransferStep.SELECT_TO.value
    assert [a["slug"] for a in source.payload["accounts"]] == ["bank", "card"]
    assert same == Reprompt(FlowKind.TRANSFER, TransferStep.SELECT_TO.value, StepError.SAME_ACCOUNT)
    assert destination.step == TransferStep.AMOUNT.value

    assert offer.step == TransferStep.RATE.value
    assert offer.payload["received_amount"] == 1160
    assert offer.payload["rate_display"] == "1 EUR = 1.105 USD"
    assert bogus.error is StepError.INVALID_CHOICE
    assert isinstance(stored, TransferSession)
    assert stored.exchange_rate == Decimal("1.105")
    assert accepted.step == TransferStep.DESCRIPTION.value

    assert isinstance(done, Completed)
    assert len(done.transaction_ids) == 2
    assert done.payload["description"] == "Rent"
    assert done.payload["rate"] == "1.105"
    assert (cash, card) == (20000 - 1050, 1160)


def test_custom_received_amount_overrides_rate(harness):
    async def scenario():
        async with harness(rates=EUR_USD) as h:
            await h.open("cash", "EUR", balance=5000)
            await h.open("card", "USD")
            d = h.dispatcher
            await _to_amount_step(h)
            await d.handle_input(event(text="10"))
            custom = await d.handle_input(event(text="custom"))
            stored = await h.store.scoped(event().key).load()
            zero = await d.handle_input(event(text="0"))
            await d.handle_input(event(text="12"))
            done = await d.handle_input(event(text="skip"))
            return custom, stored, zero, done, await h.balance("card")

    custom, stored, zero, done, card = asyncio.run(scenario())
    assert custom.step == TransferStep.RECEIVED_AMOUNT.value
    assert custom.payload["rate_unavailable"] is False
    assert stored.received_amount is None and stored.exchange_rate is None
    assert zero.error is StepError.ZERO
    assert done.payload["description"] is None
    assert done.payload["received_amount"] == 1200
    assert card == 1200


def test_missing_rate_asks_for_received_amount(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", "EUR", balance=5000)
            await h.open("card", "UAH")
            d = h.dispatcher
            await _to_amount_step(h)
            asked = await d.handle_input(event(text="20"))
            described = await d.handle_input(event(text="880"))
            done = await d.handle_input(event(text="exchange"))
            return asked, described, done, await h.balance("card"), h.rates.calls

    asked, described, done, card, calls = asyncio.run(scenario())
    assert asked.step == TransferStep.RECEIVED_AMOUNT.value
    assert asked.payload["rate_unavailable"] is True
    assert described.step == TransferStep.DESCRIPTION.value
    assert isinstance(done, Completed)
    assert card == 88000
    assert calls == [("EUR", "UAH")]


def test_same_currency_skips_rate_step(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash", "EUR", balance=5000)
            await h.open("card", "EUR")
            d = h.dispatcher
            await _to_amount_step(h)
            negative = await d.handle_input(event(text="-3"))
            described = await d.handle_input(event(text="30"))
            done = await d.handle_input(event(text="top up"))
            return negative, described, done, await h.balance("cash"), await h.balance("card"), h.rates.calls

    negative, described, done, cash, card, calls = asyncio.run(scenario())
    assert negative.error is StepError.NEGATIVE
    assert isinstance(described, Advance)
    assert described.step == TransferStep.DESCRIPTION.value
    assert described.payload == {"amount": 3000, "received_amount": 3000}
    assert (cash, card) == (2000, 3000)
    assert calls == []


def test_transfer_needs_two_accounts(harness):
    async def scenario():
        async with harness() as h:
            await h.open("cash")
            return await h.dispatcher.start_flow(event(), FlowKind.TRANSFER), await h.store.scoped(event().key).load()

    result, session = asyncio.run(scenario())
    assert result == Aborted(FlowKind.TRANSFER, StepError.NOT_ENOUGH_ACCOUNTS)
    assert session is None


def test_rate_rounding_to_nothing_asks_for_received_amount(harness):
    async def scenario():
        async with harness(rates={("EUR", "USD"): Decimal("0.02")}) as h:
            await h.open("cash", "EUR", balance=100)
            await h.open("card", "USD")
            d = h.dispatcher
            await _to_amount_step(h)
            asked = await d.handle_input(event(text="0.01"))
            stored = await h.store.scoped(event().key).load()
            return asked, stored

    asked, stored = asyncio.run(scenario())
    assert asked.step == TransferStep.RECEIVED_AMOUNT.value
    assert asked.payload["rate_unavailable"] is True
    assert stored.received_amount is None
    assert stored.exchange_rate is None
