"""Balance resynchronisation flow: select account -> actual balance.

The actor types the balance the account really has; the difference to the
stored balance is booked as a single sync transaction.
"""

from __future__ import annotations

import logging

from ledgerbot.modules.ledger.models import TransactionSource
from ledgerbot.modules.sessions.models import FlowKind, SyncSession, SyncStep

from .common import FlowContext, account_view, accounts_view
from .results import Aborted, Advance, Completed, Reprompt, StepError, StepResult

logger = logging.getLogger(__name__)


class SyncFlow:
    kind = FlowKind.SYNC

    async def start(self, ctx: FlowContext) -> StepResult:
        accounts = await ctx.deps.list_accounts()
        if not accounts:
            return Aborted(self.kind, StepError.NO_ACCOUNTS)

        await ctx.save(SyncSession(owner_id=ctx.actor.id))
        return Advance(self.kind, SyncStep.SELECT_ACCOUNT.value, {"accounts": accounts_view(accounts)})

    async def handle(self, ctx: FlowContext, session: SyncSession, text: str) -> StepResult:
        handlers = {
            SyncStep.SELECT_ACCOUNT: self._select_account,
            SyncStep.SYNC_AMOUNT: self._sync_amount,
        }
        return await handlers[session.step](ctx, session, text)

    async def _select_account(self, ctx: FlowContext, session: SyncSession, text: str) -> StepResult:
        account = await ctx.deps.find_account(text.strip())
        if account is None:
            return Reprompt(self.kind, session.step.value, StepError.ACCOUNT_NOT_FOUND)

        session.account_slug = account.slug
        session.step = SyncStep.SYNC_AMOUNT
        await ctx.save(session)
        return Advance(
            self.kind,
            session.step.value,
            {"account": account_view(account), "current_balance": account.balance},
        )

    async def _sync_amount(self, ctx: FlowContext, session: SyncSession, text: str) -> StepResult:
        parsed = ctx.deps.parse(text, allow_negative=False, allow_zero=True)
        if not parsed.ok:
            return Reprompt(self.kind, session.step.value, StepError.from_amount_error(parsed.error))

        account = await ctx.deps.find_account(session.account_slug)
        if account is None:
            logger.warning("Account %s vanished during sync flow", session.account_slug)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.ACCOUNT_NOT_FOUND)

        delta = parsed.value - account.balance
        summary = {
            "account": account_view(account),
            "previous_balance": account.balance,
            "new_balance": parsed.value,
            "delta": delta,
        }
        if delta == 0:
            await ctx.finish(session)
            return Completed(self.kind, noop=True, payload=summary)

        try:
            transaction_id = await ctx.deps.ledger.record_transaction(
                account_slug=account.slug,
                amount=delta,
                currency=account.currency,
                source=TransactionSource.SYNC,
                actor=ctx.actor,
            )
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to record sync adjustment on %s", account.slug)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.FAILED)

        await ctx.finish(session)
        return Completed(self.kind, transaction_ids=(transaction_id,), payload=summary)
