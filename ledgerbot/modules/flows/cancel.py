"""Cancellation flow: pick one of the actor's recent transactions, confirm, reverse."""

from __future__ import annotations

import logging

from ledgerbot.modules.ledger.exceptions import (
    AlreadyCancelledError,
    InvalidCancellationTargetError,
    TransactionNotFoundError,
)
from ledgerbot.modules.ledger.models import MAX_TRANSACTION_ID, TransactionRecord, TransactionSource
from ledgerbot.modules.sessions.models import CancelSession, CancelStep, FlowKind

from .common import FlowContext, transaction_view
from .results import Aborted, Advance, Completed, Reprompt, StepError, StepResult

logger = logging.getLogger(__name__)

CONFIRM = "confirm"
ABORT = "abort"


def _ineligibility(record: TransactionRecord | None, actor_id: str) -> StepError | None:
    if record is None:
        return StepError.TRANSACTION_NOT_FOUND
    if record.created_by.id != actor_id:
        return StepError.NOT_YOUR_TRANSACTION
    if record.source is TransactionSource.CANCELLATION:
        return StepError.CANNOT_CANCEL_CANCELLATION
    if record.is_cancelled:
        return StepError.ALREADY_CANCELLED
    return None


class CancelFlow:
    kind = FlowKind.CANCEL

    async def start(self, ctx: FlowContext) -> StepResult:
        candidates = await ctx.deps.ledger.list_cancellable(ctx.actor.id, ctx.deps.settings.cancel_list_limit)
        if not candidates:
            return Aborted(self.kind, StepError.NO_TRANSACTIONS)

        await ctx.save(CancelSession(owner_id=ctx.actor.id))
        return Advance(
            self.kind,
            CancelStep.SELECT_TRANSACTION.value,
            {"transactions": [transaction_view(record) for record in candidates]},
        )

    async def handle(self, ctx: FlowContext, session: CancelSession, text: str) -> StepResult:
        handlers = {
            CancelStep.SELECT_TRANSACTION: self._select,
            CancelStep.CONFIRM: self._confirm,
        }
        return await handlers[session.step](ctx, session, text)

    async def _select(self, ctx: FlowContext, session: CancelSession, text: str) -> StepResult:
        try:
            transaction_id = int(text.strip())
        except ValueError:
            return Reprompt(self.kind, session.step.value, StepError.TRANSACTION_NOT_FOUND)
        if not 0 < transaction_id <= MAX_TRANSACTION_ID:
            return Reprompt(self.kind, session.step.value, StepError.TRANSACTION_NOT_FOUND)

        record = await ctx.deps.ledger.get_transaction(transaction_id)
        error = _ineligibility(record, ctx.actor.id)
        if error is not None:
            return Reprompt(self.kind, session.step.value, error)

        session.transaction_id = record.id
        session.step = CancelStep.CONFIRM
        await ctx.save(session)
        payload = {"transaction": transaction_view(record), "choices": [CONFIRM, ABORT]}
        if record.linked_transaction_id is not None:
            linked = await ctx.deps.ledger.get_transaction(record.linked_transaction_id)
            payload["linked_transaction"] = transaction_view(linked) if linked else None
        return Advance(self.kind, session.step.value, payload)

    async def _confirm(self, ctx: FlowContext, session: CancelSession, text: str) -> StepResult:
        choice = text.strip().lower()
        if choice == ABORT:
            await ctx.finish(session)
            return Aborted(self.kind, StepError.ABANDONED)
        if choice != CONFIRM:
            return Reprompt(self.kind, session.step.value, StepError.INVALID_CHOICE)

        record = await ctx.deps.ledger.get_transaction(session.transaction_id)
        if record is not None and record.created_by.id != ctx.actor.id:
            await ctx.finish(session)
            return Aborted(self.kind, StepError.NOT_YOUR_TRANSACTION)
        if record is None:
            await ctx.finish(session)
            return Aborted(self.kind, StepError.TRANSACTION_NOT_FOUND)

        ledger = ctx.deps.ledger
        try:
            if record.source is TransactionSource.TRANSFER:
                ids = await ledger.cancel_transfer(record.id, actor=ctx.actor)
                transaction_ids = (ids.outgoing_id, ids.incoming_id)
            else:
                transaction_ids = (await ledger.cancel_transaction(record.id, actor=ctx.actor),)
        except AlreadyCancelledError:
            logger.warning("Transaction %s was cancelled concurrently", record.id)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.ALREADY_CANCELLED)
        except InvalidCancellationTargetError:
            await ctx.finish(session)
            return Aborted(self.kind, StepError.CANNOT_CANCEL_CANCELLATION)
        except TransactionNotFoundError:
            await ctx.finish(session)
            return Aborted(self.kind, StepError.TRANSACTION_NOT_FOUND)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to cancel transaction %s", record.id)
            await ctx.finish(session)
            return Aborted(self.kind, StepError.FAILED)

        await ctx.finish(session)
        return Completed(
            self.kind,
            transaction_ids=transaction_ids,
            payload={"original": transaction_view(record)},
        )
