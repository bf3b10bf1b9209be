"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .ledger_repository import SqlLedgerRepository
from .session_repository import SqlFlowSessionRepository

__all__ = [
    "SqlAccountRepository",
    "SqlFlowSessionRepository",
    "SqlLedgerRepository",
]
