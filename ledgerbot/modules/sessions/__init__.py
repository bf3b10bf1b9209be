"""Flow session exports"""

from .models import (
    AddSession,
    AddStep,
    CancelSession,
    CancelStep,
    FlowKind,
    FlowSession,
    SessionKey,
    SyncSession,
    SyncStep,
    TransferSession,
    TransferStep,
)

__all__ = [
    "AddSession",
    "AddStep",
    "CancelSession",
    "CancelStep",
    "FlowKind",
    "FlowSession",
    "SessionKey",
    "SyncSession",
    "SyncStep",
    "TransferSession",
    "TransferStep",
]
