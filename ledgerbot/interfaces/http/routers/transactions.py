"""Transaction history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ledgerbot.interfaces.http.deps import get_ledger_service
from ledgerbot.modules.ledger.models import MAX_TRANSACTION_ID
from ledgerbot.modules.ledger.service import LedgerService
from ledgerbot.schemas import TransactionListResponse, TransactionResponse

router = APIRouter()


@router.get("/", response_model=TransactionListResponse, summary="Recent transactions, newest first")
async def list_transactions(
    account: Optional[str] = None,
    limit: int = Query(default=20, ge=1, le=200),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    records = await ledger.list_transactions(account_slug=account, limit=limit)
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(record) for record in records],
    )


@router.get("/{transaction_id}", response_model=TransactionResponse, summary="Transaction details")
async def get_transaction(
    transaction_id: int = Path(ge=1, le=MAX_TRANSACTION_ID),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    record = await ledger.get_transaction(transaction_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return TransactionResponse.model_validate(record)
