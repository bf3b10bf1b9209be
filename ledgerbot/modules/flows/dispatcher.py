"""Routes actor events to the flow that owns their session."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from ledgerbot.modules.sessions.models import FlowKind, FlowSession
from ledgerbot.modules.sessions.store import SessionStore

from .add import AddFlow
from .cancel import CancelFlow
from .cleanup import release_artifacts
from .common import FlowContext, FlowDependencies, InboundEvent
from .results import Aborted, Reprompt, StepError, StepResult
from .sync import SyncFlow
from .transfer import TransferFlow

logger = logging.getLogger(__name__)


class Flow(Protocol):
    kind: FlowKind

    async def start(self, ctx: FlowContext) -> StepResult:
        ...

    async def handle(self, ctx: FlowContext, session: FlowSession, text: str) -> StepResult:
        ...


FLOWS: dict[FlowKind, Flow] = {
    FlowKind.ADD: AddFlow(),
    FlowKind.SYNC: SyncFlow(),
    FlowKind.TRANSFER: TransferFlow(),
    FlowKind.CANCEL: CancelFlow(),
}
if set(FLOWS) != set(FlowKind):
    raise RuntimeError(f"Flow kinds without a handler: {sorted(k.value for k in set(FlowKind) - set(FLOWS))}")


class FlowDispatcher:
    """Entry point for the transport layer.

    One session per (chat, actor): starting a flow replaces whatever that
    actor had in progress in the chat, and other actors are never touched.
    """

    def __init__(self, store: SessionStore, deps: FlowDependencies) -> None:
        self._store = store
        self._deps = deps

    def _context(self, event: InboundEvent) -> FlowContext:
        return FlowContext(event=event, sessions=self._store.scoped(event.key), deps=self._deps)

    async def start_flow(self, event: InboundEvent, kind: FlowKind) -> StepResult:
        kind = FlowKind(kind)
        ctx = self._context(event)
        previous = await ctx.sessions.discard()
        if previous is not None:
            logger.info(
                "Actor %s in chat %s abandoned %s flow at %s to start %s",
                event.actor.id,
                event.chat_id,
                previous.kind.value,
                previous.step.value,
                kind.value,
            )
            await release_artifacts(self._deps.cleaner, event.chat_id, previous.artifact_ids)
        return await FLOWS[kind].start(ctx)

    async def handle_input(self, event: InboundEvent) -> Optional[StepResult]:
        """Feed free text to the active flow; ``None`` when the actor has none."""
        ctx = self._context(event)
        session = await ctx.sessions.load()
        if session is None:
            return None
        result = await FLOWS[session.kind].handle(ctx, session, event.text)
        if isinstance(result, Reprompt):
            # rejected input keeps the step but its artifacts still belong to the flow
            await self.track_artifacts(event)
        return result

    async def abandon(self, event: InboundEvent) -> Optional[Aborted]:
        ctx = self._context(event)
        session = await ctx.sessions.load()
        if session is None:
            return None
        await ctx.finish(session)
        logger.info("Actor %s abandoned %s flow in chat %s", event.actor.id, session.kind.value, event.chat_id)
        return Aborted(session.kind, StepError.ABANDONED)

    async def track_artifacts(self, event: InboundEvent) -> bool:
        """Attach the event's artifacts to the active session so they are cleaned up with it."""
        if not event.artifact_ids:
            return False
        ctx = self._context(event)
        session = await ctx.sessions.load()
        if session is None:
            return False
        await ctx.save(session)
        return True
