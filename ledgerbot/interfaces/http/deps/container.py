"""Container and service dependency providers."""

from fastapi import Depends, Request

from ledgerbot.core.container import ApplicationContainer
from ledgerbot.modules.ledger.service import LedgerService


def get_app_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_ledger_service(container: ApplicationContainer = Depends(get_app_container)) -> LedgerService:
    return container.ledger


__all__ = [
    "get_app_container",
    "get_ledger_service",
]
