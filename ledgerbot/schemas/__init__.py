"""Pydantic schemas used by the HTTP interface."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ledgerbot.modules.ledger.models import TransactionSource, TransferType


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    slug: str = Field(..., min_length=2, max_length=50)
    currency: str = Field(..., min_length=3, max_length=3)
    opening_balance: int = 0


class AccountResponse(BaseModel):
    id: str
    name: str
    slug: str
    currency: str
    balance: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AccountListResponse(BaseModel):
    total: int
    accounts: list[AccountResponse]


class ActorResponse(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    id: int
    account_slug: str
    amount: int
    currency: str
    description: Optional[str] = None
    source: TransactionSource
    balance_after: int
    created_by: ActorResponse
    created_at: Optional[datetime] = None
    linked_transaction_id: Optional[int] = None
    transfer_type: Optional[TransferType] = None
    cancelled_transaction_id: Optional[int] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_txn_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]


class AccountDetailResponse(AccountResponse):
    recent_transactions: list[TransactionResponse] = Field(default_factory=list)


class IntegrityMismatchResponse(BaseModel):
    transaction_id: Optional[int] = None
    expected: int
    actual: int

    model_config = ConfigDict(from_attributes=True)


class IntegrityReportResponse(BaseModel):
    account_slug: str
    ok: bool
    transactions_checked: int
    replayed_balance: int
    stored_balance: int
    mismatch: Optional[IntegrityMismatchResponse] = None

    model_config = ConfigDict(from_attributes=True)


class FlowEvent(BaseModel):
    chat_id: str = Field(..., min_length=1)
    actor_id: str = Field(..., min_length=1)
    actor_name: str = "Unknown"
    text: str = ""
    artifact_ids: list[str] = Field(default_factory=list)


class FlowStepResponse(BaseModel):
    """Serialized step result.

    ``status`` is one of ``reprompt``, ``advance``, ``completed``,
    ``aborted`` or ``idle`` (no active flow for this actor).
    """

    status: str
    kind: Optional[str] = None
    step: Optional[str] = None
    error: Optional[str] = None
    noop: bool = False
    transaction_ids: list[int] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)
    released_artifacts: list[str] = Field(default_factory=list)


class ArtifactTrackResponse(BaseModel):
    tracked: bool
