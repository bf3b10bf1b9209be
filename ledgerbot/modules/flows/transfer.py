"""Transfer flow between two accounts, possibly in different currencies.

select source -> select destination -> amount -> [cross-currency: rate offer
-> accept or custom received amount] -> description.
"""

from __future__ import annotations

import logging
from typing import Optional

from ledgerbot.modules.accounts.models import Account
from ledgerbot.modules.currency.service import SAME_CURRENCY_RATE, format_exchange_rate
from ledgerbot.modules.sessions.models import FlowKind, TransferSession, TransferStep

from .common import FlowContext, account_view, accounts_view
from .results import Aborted, Advance, Completed, Reprompt, StepError, StepResult

logger = logging.getLogger(__name__)

ACCEPT_RATE = "accept"
CUSTOM_AMOUNT = "custom"


class TransferFlow:
    kind = FlowKind.TRANSFER

    async def start(self, ctx: FlowContext) -> StepResult:
        accounts = await ctx.deps.list_accounts()
        if len(accounts) < 2:
            return Aborted(self.kind, StepError.NOT_ENOUGH_ACCOUNTS)

        await ctx.save(TransferSession(owner_id=ctx.actor.id))
        return Advance(self.kind, TransferStep.SELECT_FROM.value, {"accounts": accounts_view(accounts)})

    async def handle(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        handlers = {
            TransferStep.SELECT_FROM: self._select_from,
            TransferStep.SELECT_TO: self._select_to,
            TransferStep.AMOUNT: self._amount,
            TransferStep.RATE: self._rate,
            TransferStep.RECEIVED_AMOUNT: self._received_amount,
            TransferStep.DESCRIPTION: self._description,
        }
        return await handlers[session.step](ctx, session, text)

    async def _resolve(
        self, ctx: FlowContext, session: TransferSession
    ) -> tuple[Optional[Account], Optional[Account]]:
        return (
            await ctx.deps.find_account(session.from_slug),
            await ctx.deps.find_account(session.to_slug),
        )

    async def _stale(self, ctx: FlowContext, session: TransferSession) -> StepResult:
        logger.warning(
            "Transfer accounts %s -> %s no longer resolve; abandoning flow",
            session.from_slug,
            session.to_slug,
        )
        await ctx.finish(session)
        return Aborted(self.kind, StepError.ACCOUNT_NOT_FOUND)

    async def _select_from(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        source = await ctx.deps.find_account(text.strip())
        if source is None:
            return Reprompt(self.kind, session.step.value, StepError.ACCOUNT_NOT_FOUND)

        others = [account for account in await ctx.deps.list_accounts() if account.slug != source.slug]
        if not others:
            await ctx.finish(session)
            return Aborted(self.kind, StepError.NOT_ENOUGH_ACCOUNTS)

        session.from_slug = source.slug
        session.step = TransferStep.SELECT_TO
        await ctx.save(session)
        return Advance(
            self.kind,
            session.step.value,
            {"from": account_view(source), "accounts": accounts_view(others)},
        )

    async def _select_to(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        slug = text.strip()
        if slug == session.from_slug:
            return Reprompt(self.kind, session.step.value, StepError.SAME_ACCOUNT)

        destination = await ctx.deps.find_account(slug)
        if destination is None:
            return Reprompt(self.kind, session.step.value, StepError.ACCOUNT_NOT_FOUND)
        source = await ctx.deps.find_account(session.from_slug)
        if source is None:
            return await self._stale(ctx, session)

        session.to_slug = destination.slug
        session.step = TransferStep.AMOUNT
        await ctx.save(session)
        return Advance(
            self.kind,
            session.step.value,
            {"from": account_view(source), "to": account_view(destination), "currency": source.currency},
        )

    async def _amount(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        parsed = ctx.deps.parse(text, allow_negative=False, allow_zero=False)
        if not parsed.ok:
            return Reprompt(self.kind, session.step.value, StepError.from_amount_error(parsed.error))

        source, destination = await self._resolve(ctx, session)
        if source is None or destination is None:
            return await self._stale(ctx, session)

        session.amount = parsed.value
        if source.currency == destination.currency:
            session.received_amount = session.amount
            session.exchange_rate = SAME_CURRENCY_RATE
            return await self._ask_description(ctx, session)

        conversion = await ctx.deps.converter.convert(session.amount, source.currency, destination.currency)
        # a rate that rounds the received amount away leaves nothing to book
        if conversion is None or conversion.amount <= 0:
            session.received_amount = None
            session.exchange_rate = None
            session.step = TransferStep.RECEIVED_AMOUNT
            await ctx.save(session)
            return Advance(
                self.kind,
                session.step.value,
                {"rate_unavailable": True, "to": account_view(destination), "currency": destination.currency},
            )

        session.received_amount = conversion.amount
        session.exchange_rate = conversion.rate
        session.step = TransferStep.RATE
        await ctx.save(session)
        return Advance(
            self.kind,
            session.step.value,
            {
                "amount": session.amount,
                "received_amount": conversion.amount,
                "rate": str(conversion.rate),
                "rate_display": format_exchange_rate(conversion.rate, source.currency, destination.currency),
                "choices": [ACCEPT_RATE, CUSTOM_AMOUNT],
            },
        )

    async def _rate(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        choice = text.strip().lower()
        if choice == ACCEPT_RATE:
            return await self._ask_description(ctx, session)
        if choice != CUSTOM_AMOUNT:
            return Reprompt(self.kind, session.step.value, StepError.INVALID_CHOICE)

        destination = await ctx.deps.find_account(session.to_slug)
        if destination is None:
            return await self._stale(ctx, session)

        # a typed amount replaces the offered conversion outright
        session.received_amount = None
        session.exchange_rate = None
        session.step = TransferStep.RECEIVED_AMOUNT
        await ctx.save(session)
        return Advance(
            self.kind,
            session.step.value,
            {"rate_unavailable": False, "to": account_view(destination), "currency": destination.currency},
        )

    async def _received_amount(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        parsed = ctx.deps.parse(text, allow_negative=False, allow_zero=False)
        if not parsed.ok:
            return Reprompt(self.kind, session.step.value, StepError.from_amount_error(parsed.error))

        session.received_amount = parsed.value
        return await self._ask_description(ctx, session)

    async def _ask_description(self, ctx: FlowContext, session: TransferSession) -> StepResult:
        session.step = TransferStep.DESCRIPTION
        await ctx.save(session)
        return Advance(
            self.kind,
            session.step.value,
            {"amount": session.amount, "received_amount": session.received_amount},
        )

    async def _description(self, ctx: FlowContext, session: TransferSession, text: str) -> StepResult:
        source, destination = await self._resolve(ctx, session)
        if source is None or destination is None:
            return await self._stale(ctx, session)

        description = ctx.deps.description(text)
        try:
            ids = await ctx.deps.ledger.record_transfer(
                from_slug=source.slug,
                to_slug=destination.slug,
                from_amount=session.amount,
                to_amount=session.received_amount,
                from_currency=source.currency,
                to_currency=destination.currency,
                description=description,
                actor=ctx.actor,
            )
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to record transfer %s -> %s", source.slug, destination.slug)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.FAILED)

        await ctx.finish(session)
        return Completed(
            self.kind,
            transaction_ids=(ids.outgoing_id, ids.incoming_id),
            payload={
                "from": account_view(source),
                "to": account_view(destination),
                "amount": session.amount,
                "received_amount": session.received_amount,
                "rate": str(session.exchange_rate) if session.exchange_rate is not None else None,
                "description": description,
                "created_by": ctx.actor.name,
            },
        )
