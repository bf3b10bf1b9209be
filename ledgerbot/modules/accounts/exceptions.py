"""Account domain specific exceptions."""


class AccountError(Exception):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(AccountError):
    """Raised when attempting to create an account with a duplicate slug."""


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""

    def __init__(self, slug: str) -> None:
        super().__init__(slug)
        self.slug = slug


class InvalidAccountError(AccountError):
    """Raised when account fields fail validation."""
