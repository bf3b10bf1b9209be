"""Account domain exports"""

from .exceptions import AccountAlreadyExistsError, AccountError, AccountNotFoundError, InvalidAccountError
from .models import Account, AccountCreateInput

__all__ = [
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountNotFoundError",
    "InvalidAccountError",
]
