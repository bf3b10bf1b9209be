"""Per-step results returned to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from ledgerbot.modules.currency.money import AmountError
from ledgerbot.modules.sessions.models import FlowKind


class StepError(str, Enum):
    # amount validation, mirrors AmountError
    INVALID = "invalid"
    ZERO = "zero"
    NEGATIVE = "negative"
    MAX_DECIMALS = "max_decimals"
    MAX_AMOUNT = "max_amount"

    INVALID_CHOICE = "invalid_choice"
    ACCOUNT_NOT_FOUND = "account_not_found"
    SAME_ACCOUNT = "same_account"
    NO_ACCOUNTS = "no_accounts"
    NOT_ENOUGH_ACCOUNTS = "not_enough_accounts"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    NOT_YOUR_TRANSACTION = "not_your_transaction"
    ALREADY_CANCELLED = "already_cancelled"
    CANNOT_CANCEL_CANCELLATION = "cannot_cancel_cancellation"
    NO_TRANSACTIONS = "no_transactions"
    ABANDONED = "abandoned"
    FAILED = "failed"

    @classmethod
    def from_amount_error(cls, error: AmountError) -> "StepError":
        return cls(error.value)


@dataclass(frozen=True, slots=True)
class Reprompt:
    """Input rejected; the session stays on ``step``."""

    kind: FlowKind
    step: str
    error: StepError


@dataclass(frozen=True, slots=True)
class Advance:
    kind: FlowKind
    step: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Completed:
    kind: FlowKind
    transaction_ids: tuple[int, ...] = ()
    noop: bool = False
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Aborted:
    """The flow ended without a ledger write; any session has been discarded."""

    kind: FlowKind
    error: StepError


StepResult = Union[Reprompt, Advance, Completed, Aborted]
