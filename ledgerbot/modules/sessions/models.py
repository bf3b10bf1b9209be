"""Flow sessions: one in-progress multi-step interaction per (chat, actor).

Each flow kind has its own session type carrying only the fields that
flow needs, with a step enum listing that flow's states.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union


class FlowKind(str, Enum):
    ADD = "add"
    SYNC = "sync"
    TRANSFER = "transfer"
    CANCEL = "cancel"


class AddStep(str, Enum):
    SELECT_ACCOUNT = "select_account"
    AMOUNT = "amount"
    DESCRIPTION = "description"


class SyncStep(str, Enum):
    SELECT_ACCOUNT = "select_account"
    SYNC_AMOUNT = "sync_amount"


class TransferStep(str, Enum):
    SELECT_FROM = "select_from"
    SELECT_TO = "select_to"
    AMOUNT = "amount"
    RATE = "rate"
    RECEIVED_AMOUNT = "received_amount"
    DESCRIPTION = "description"


class CancelStep(str, Enum):
    SELECT_TRANSACTION = "select_transaction"
    CONFIRM = "confirm"


@dataclass(frozen=True, slots=True)
class SessionKey:
    chat_id: str
    actor_id: str


@dataclass(slots=True)
class AddSession:
    kind: ClassVar[FlowKind] = FlowKind.ADD

    owner_id: str
    step: AddStep = AddStep.SELECT_ACCOUNT
    account_slug: Optional[str] = None
    amount: Optional[int] = None
    artifact_ids: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class SyncSession:
    kind: ClassVar[FlowKind] = FlowKind.SYNC

    owner_id: str
    step: SyncStep = SyncStep.SELECT_ACCOUNT
    account_slug: Optional[str] = None
    artifact_ids: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class TransferSession:
    kind: ClassVar[FlowKind] = FlowKind.TRANSFER

    owner_id: str
    step: TransferStep = TransferStep.SELECT_FROM
    from_slug: Optional[str] = None
    to_slug: Optional[str] = None
    amount: Optional[int] = None
    received_amount: Optional[int] = None
    exchange_rate: Optional[Decimal] = None
    artifact_ids: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class CancelSession:
    kind: ClassVar[FlowKind] = FlowKind.CANCEL

    owner_id: str
    step: CancelStep = CancelStep.SELECT_TRANSACTION
    transaction_id: Optional[int] = None
    artifact_ids: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


FlowSession = Union[AddSession, SyncSession, TransferSession, CancelSession]

SESSION_TYPES: dict[FlowKind, type] = {
    FlowKind.ADD: AddSession,
    FlowKind.SYNC: SyncSession,
    FlowKind.TRANSFER: TransferSession,
    FlowKind.CANCEL: CancelSession,
}

STEP_TYPES: dict[FlowKind, type[Enum]] = {
    FlowKind.ADD: AddStep,
    FlowKind.SYNC: SyncStep,
    FlowKind.TRANSFER: TransferStep,
    FlowKind.CANCEL: CancelStep,
}

# stored in dedicated columns rather than the JSON payload
_COLUMN_FIELDS = {"owner_id", "step", "artifact_ids", "created_at"}


@dataclass(slots=True)
class SessionRecord:
    chat_id: str
    actor_id: str
    kind: str
    step: str
    payload: str
    artifact_ids: str
    created_at: Optional[datetime] = None


def session_to_record(key: SessionKey, session: FlowSession) -> SessionRecord:
    payload = {
        name: value
        for name, value in asdict(session).items()
        if name not in _COLUMN_FIELDS
    }
    if isinstance(session, TransferSession) and session.exchange_rate is not None:
        payload["exchange_rate"] = str(session.exchange_rate)
    return SessionRecord(
        chat_id=key.chat_id,
        actor_id=key.actor_id,
        kind=session.kind.value,
        step=session.step.value,
        payload=json.dumps(payload),
        artifact_ids=json.dumps(list(session.artifact_ids)),
        created_at=session.created_at,
    )


def record_to_session(record: SessionRecord) -> FlowSession:
    kind = FlowKind(record.kind)
    session_type = SESSION_TYPES[kind]
    payload = json.loads(record.payload or "{}")
    known = {f.name for f in fields(session_type)} - _COLUMN_FIELDS
    values = {name: value for name, value in payload.items() if name in known}
    if kind is FlowKind.TRANSFER and values.get("exchange_rate") is not None:
        values["exchange_rate"] = Decimal(values["exchange_rate"])
    return session_type(
        owner_id=record.actor_id,
        step=STEP_TYPES[kind](record.step),
        artifact_ids=list(json.loads(record.artifact_ids or "[]")),
        created_at=record.created_at,
        **values,
    )
