"""Domain models for ledger operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

# transaction ids are signed 64-bit integers in the store
MAX_TRANSACTION_ID = 2**63 - 1


class TransactionSource(str, Enum):
    MANUAL = "manual"
    SYNC = "sync"
    TRANSFER = "transfer"
    CANCELLATION = "cancellation"


class TransferType(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


@dataclass(frozen=True, slots=True)
class Actor:
    id: str
    name: str = "Unknown"


@dataclass(slots=True)
class TransactionRecord:
    id: int
    account_slug: str
    amount: int
    currency: str
    description: Optional[str]
    source: TransactionSource
    balance_after: int
    created_by: Actor
    created_at: Optional[datetime]
    linked_transaction_id: Optional[int] = None
    transfer_type: Optional[TransferType] = None
    cancelled_transaction_id: Optional[int] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_txn_id: Optional[int] = None

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None

    @property
    def is_transfer(self) -> bool:
        return self.source is TransactionSource.TRANSFER and self.linked_transaction_id is not None


@dataclass(frozen=True, slots=True)
class TransferIds:
    outgoing_id: int
    incoming_id: int


@dataclass(frozen=True, slots=True)
class IntegrityMismatch:
    # None when the replayed sum disagrees with the stored account balance
    transaction_id: Optional[int]
    expected: int
    actual: int


@dataclass(frozen=True, slots=True)
class IntegrityReport:
    account_slug: str
    transactions_checked: int
    replayed_balance: int
    stored_balance: int
    mismatch: Optional[IntegrityMismatch] = None

    @property
    def ok(self) -> bool:
        return self.mismatch is None
