"""Ledger domain exports"""

from .exceptions import (
    AccountNotFoundError,
    AlreadyCancelledError,
    InvalidCancellationTargetError,
    LedgerError,
    NotATransferError,
    SameAccountTransferError,
    TransactionNotFoundError,
)
from .models import (
    MAX_TRANSACTION_ID,
    Actor,
    IntegrityMismatch,
    IntegrityReport,
    TransactionRecord,
    TransactionSource,
    TransferIds,
    TransferType,
)

__all__ = [
    "MAX_TRANSACTION_ID",
    "AccountNotFoundError",
    "Actor",
    "AlreadyCancelledError",
    "IntegrityMismatch",
    "IntegrityReport",
    "InvalidCancellationTargetError",
    "LedgerError",
    "NotATransferError",
    "SameAccountTransferError",
    "TransactionNotFoundError",
    "TransactionRecord",
    "TransactionSource",
    "TransferIds",
    "TransferType",
]
