"""Errors raised by the user directory."""


class AccountsServiceError(Exception):
    """Base exception for user directory lookups."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when an identity does not resolve to a user."""
    pass
