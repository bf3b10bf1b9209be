"""Manual entry flow: select account -> amount -> description."""

from __future__ import annotations

import logging

from ledgerbot.modules.ledger.models import TransactionSource
from ledgerbot.modules.sessions.models import AddSession, AddStep, FlowKind

from .common import FlowContext, account_view, accounts_view
from .results import Aborted, Advance, Completed, Reprompt, StepError, StepResult

logger = logging.getLogger(__name__)


class AddFlow:
    kind = FlowKind.ADD

    async def start(self, ctx: FlowContext) -> StepResult:
        accounts = await ctx.deps.list_accounts()
        if not accounts:
            return Aborted(self.kind, StepError.NO_ACCOUNTS)

        await ctx.save(AddSession(owner_id=ctx.actor.id))
        return Advance(self.kind, AddStep.SELECT_ACCOUNT.value, {"accounts": accounts_view(accounts)})

    async def handle(self, ctx: FlowContext, session: AddSession, text: str) -> StepResult:
        handlers = {
            AddStep.SELECT_ACCOUNT: self._select_account,
            AddStep.AMOUNT: self._amount,
            AddStep.DESCRIPTION: self._description,
        }
        return await handlers[session.step](ctx, session, text)

    async def _select_account(self, ctx: FlowContext, session: AddSession, text: str) -> StepResult:
        account = await ctx.deps.find_account(text.strip())
        if account is None:
            return Reprompt(self.kind, session.step.value, StepError.ACCOUNT_NOT_FOUND)

        session.account_slug = account.slug
        session.step = AddStep.AMOUNT
        await ctx.save(session)
        return Advance(self.kind, session.step.value, {"account": account_view(account)})

    async def _amount(self, ctx: FlowContext, session: AddSession, text: str) -> StepResult:
        parsed = ctx.deps.parse(text, allow_negative=True, allow_zero=False)
        if not parsed.ok:
            return Reprompt(self.kind, session.step.value, StepError.from_amount_error(parsed.error))

        session.amount = parsed.value
        session.step = AddStep.DESCRIPTION
        await ctx.save(session)
        return Advance(self.kind, session.step.value, {"amount": session.amount})

    async def _description(self, ctx: FlowContext, session: AddSession, text: str) -> StepResult:
        account = await ctx.deps.find_account(session.account_slug)
        if account is None:
            logger.warning("Account %s vanished during add flow", session.account_slug)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.ACCOUNT_NOT_FOUND)

        description = ctx.deps.description(text)
        try:
            transaction_id = await ctx.deps.ledger.record_transaction(
                account_slug=account.slug,
                amount=session.amount,
                currency=account.currency,
                description=description,
                source=TransactionSource.MANUAL,
                actor=ctx.actor,
            )
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to record transaction on %s", account.slug)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.FAILED)

        await ctx.finish(session)
        account = await ctx.deps.find_account(account.slug) or account
        return Completed(
            self.kind,
            transaction_ids=(transaction_id,),
            payload={
                "account": account_view(account),
                "amount": session.amount,
                "description": description,
                "created_by": ctx.actor.name,
            },
        )
