"""Account endpoints: listing, administrative creation, integrity checks."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerbot.core.container import ApplicationContainer
from ledgerbot.interfaces.http.deps import get_app_container, get_db_session, get_ledger_service
from ledgerbot.modules.accounts import AccountAlreadyExistsError, AccountCreateInput, AccountNotFoundError, InvalidAccountError
from ledgerbot.modules.accounts.service import AccountService
from ledgerbot.modules.ledger import Actor
from ledgerbot.modules.ledger.service import LedgerService
from ledgerbot.schemas import (
    AccountCreate,
    AccountDetailResponse,
    AccountListResponse,
    AccountResponse,
    IntegrityReportResponse,
    TransactionResponse,
)

router = APIRouter()

ADMIN_ACTOR = Actor(id="admin", name="Administrator")


@router.get("/", response_model=AccountListResponse, summary="List accounts with balances")
async def list_accounts(db: AsyncSession = Depends(get_db_session)) -> AccountListResponse:
    accounts = await AccountService.with_session(db).list_accounts()
    return AccountListResponse(
        total=len(accounts),
        accounts=[AccountResponse.model_validate(account) for account in accounts],
    )


@router.post("/", response_model=AccountResponse, status_code=status.HTTP_201_CREATED, summary="Open an account")
async def create_account(
    payload: AccountCreate,
    ledger: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    try:
        account = await ledger.open_account(
            AccountCreateInput(
                name=payload.name,
                slug=payload.slug,
                currency=payload.currency,
                opening_balance=payload.opening_balance,
            ),
            actor=ADMIN_ACTOR,
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InvalidAccountError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return AccountResponse.model_validate(account)


@router.get("/{slug}", response_model=AccountDetailResponse, summary="Account with recent transactions")
async def get_account(
    slug: str,
    container: ApplicationContainer = Depends(get_app_container),
) -> AccountDetailResponse:
    # short read unit; the history query below opens its own
    async with container.session_factory() as db:
        try:
            account = await AccountService.with_session(db).get(slug)
        except AccountNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account '{slug}' not found") from exc

    history = await container.ledger.list_transactions(
        account_slug=account.slug,
        limit=container.settings.ledger.history_limit,
    )
    return AccountDetailResponse(
        **AccountResponse.model_validate(account).model_dump(),
        recent_transactions=[TransactionResponse.model_validate(record) for record in history],
    )


@router.get("/{slug}/integrity", response_model=IntegrityReportResponse, summary="Replay and verify balances")
async def verify_account_integrity(
    slug: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> IntegrityReportResponse:
    try:
        report = await ledger.verify_integrity(slug)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account '{slug}' not found") from exc
    return IntegrityReportResponse.model_validate(report)
