"""HTTP interface (FastAPI routers and dependencies)."""

from fastapi import APIRouter

from .routers import accounts, flows, transactions


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
    router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
    router.include_router(flows.router, prefix="/flows", tags=["flows"])
    return router


__all__ = [
    "create_api_router",
]
