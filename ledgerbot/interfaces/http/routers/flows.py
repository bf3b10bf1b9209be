"""Conversational flow endpoints.

The transport (a chat bot front-end) posts every actor event here and
renders the returned step; ``released_artifacts`` lists the prompt
messages it should delete.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ledgerbot.core.container import ApplicationContainer
from ledgerbot.interfaces.http.deps import get_app_container
from ledgerbot.modules.flows import (
    Aborted,
    Advance,
    Completed,
    DeferredArtifactCleaner,
    FlowDispatcher,
    InboundEvent,
    Reprompt,
    StepResult,
)
from ledgerbot.modules.ledger import Actor
from ledgerbot.modules.sessions import FlowKind
from ledgerbot.schemas import ArtifactTrackResponse, FlowEvent, FlowStepResponse

router = APIRouter()


def _to_event(payload: FlowEvent) -> InboundEvent:
    return InboundEvent(
        chat_id=payload.chat_id,
        actor=Actor(id=payload.actor_id, name=payload.actor_name),
        text=payload.text,
        artifact_ids=tuple(payload.artifact_ids),
    )


def _to_response(result: Optional[StepResult], cleaner: DeferredArtifactCleaner) -> FlowStepResponse:
    released = list(cleaner.released)
    if result is None:
        return FlowStepResponse(status="idle", released_artifacts=released)
    if isinstance(result, Reprompt):
        return FlowStepResponse(
            status="reprompt",
            kind=result.kind.value,
            step=result.step,
            error=result.error.value,
            released_artifacts=released,
        )
    if isinstance(result, Advance):
        return FlowStepResponse(
            status="advance",
            kind=result.kind.value,
            step=result.step,
            payload=result.payload,
            released_artifacts=released,
        )
    if isinstance(result, Completed):
        return FlowStepResponse(
            status="completed",
            kind=result.kind.value,
            noop=result.noop,
            transaction_ids=list(result.transaction_ids),
            payload=result.payload,
            released_artifacts=released,
        )
    if not isinstance(result, Aborted):
        raise TypeError(f"Unexpected step result {type(result).__name__}")
    return FlowStepResponse(
        status="aborted",
        kind=result.kind.value,
        error=result.error.value,
        released_artifacts=released,
    )


def _dispatcher(container: ApplicationContainer) -> tuple[FlowDispatcher, DeferredArtifactCleaner]:
    cleaner = DeferredArtifactCleaner()
    return container.flow_dispatcher(cleaner), cleaner


@router.post("/{kind}/start", response_model=FlowStepResponse, summary="Start a flow, replacing any active one")
async def start_flow(
    kind: FlowKind,
    payload: FlowEvent,
    container: ApplicationContainer = Depends(get_app_container),
) -> FlowStepResponse:
    dispatcher, cleaner = _dispatcher(container)
    result = await dispatcher.start_flow(_to_event(payload), kind)
    return _to_response(result, cleaner)


@router.post("/input", response_model=FlowStepResponse, summary="Feed free text to the active flow")
async def flow_input(
    payload: FlowEvent,
    container: ApplicationContainer = Depends(get_app_container),
) -> FlowStepResponse:
    dispatcher, cleaner = _dispatcher(container)
    result = await dispatcher.handle_input(_to_event(payload))
    return _to_response(result, cleaner)


@router.post("/abandon", response_model=FlowStepResponse, summary="Abandon the active flow")
async def abandon_flow(
    payload: FlowEvent,
    container: ApplicationContainer = Depends(get_app_container),
) -> FlowStepResponse:
    dispatcher, cleaner = _dispatcher(container)
    result = await dispatcher.abandon(_to_event(payload))
    return _to_response(result, cleaner)


@router.post("/artifacts", response_model=ArtifactTrackResponse, summary="Register UI artifacts with the active flow")
async def track_artifacts(
    payload: FlowEvent,
    container: ApplicationContainer = Depends(get_app_container),
) -> ArtifactTrackResponse:
    dispatcher, _ = _dispatcher(container)
    tracked = await dispatcher.track_artifacts(_to_event(payload))
    return ArtifactTrackResponse(tracked=tracked)
