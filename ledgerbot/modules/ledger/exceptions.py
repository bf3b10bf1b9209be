"""Ledger domain specific exceptions.

All of these are raised from the validation phase of a unit of work,
before anything has been written.
"""

from ledgerbot.modules.accounts.exceptions import AccountNotFoundError


class LedgerError(Exception):
    """Base class for ledger domain errors."""


class TransactionNotFoundError(LedgerError):
    """Raised when a referenced transaction does not exist."""

    def __init__(self, transaction_id: int) -> None:
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id


class AlreadyCancelledError(LedgerError):
    """Raised when cancelling a transaction that already has a reversal."""

    def __init__(self, transaction_id: int) -> None:
        super().__init__(f"Transaction already cancelled: {transaction_id}")
        self.transaction_id = transaction_id


class InvalidCancellationTargetError(LedgerError):
    """Raised when cancelling a reversal."""


class NotATransferError(LedgerError):
    """Raised when a transfer cancellation targets a non-transfer transaction."""


class SameAccountTransferError(LedgerError):
    """Raised when a transfer names the same account on both sides."""


__all__ = [
    "AccountNotFoundError",
    "AlreadyCancelledError",
    "InvalidCancellationTargetError",
    "LedgerError",
    "NotATransferError",
    "SameAccountTransferError",
    "TransactionNotFoundError",
]
