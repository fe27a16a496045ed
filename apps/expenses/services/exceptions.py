"""
Domain exceptions for the expenses app.

Validation errors are raised before anything is written; views turn them
into 400 responses. ``PersistenceFailureError`` is raised when the store
rejects a ledger batch and maps straight to HTTP 503.
"""
from rest_framework.exceptions import APIException


class ExpensesServiceError(Exception):
    """Base exception for expense service errors."""
    pass


class InvalidAmountError(ExpensesServiceError):
    """Raised when an amount is missing, not a number or not positive."""
    pass


class NoParticipantsError(ExpensesServiceError):
    """Raised when an equal split has nobody to split between."""
    pass


class InvalidSplitError(ExpensesServiceError):
    """Raised when a share map is malformed (negative or unknown shares)."""
    pass


class SplitMismatchError(ExpensesServiceError):
    """Raised when exact shares do not add up to the entry amount."""

    def __init__(self, amount, total):
        self.amount = amount
        self.total = total
        super().__init__(f"Shares add up to {total}, expected {amount}")


class InvalidSettlementError(ExpensesServiceError):
    """Raised when a settlement has identical payer and receiver."""
    pass


class SettlementNotEditableError(ExpensesServiceError):
    """Raised when trying to edit a settlement entry."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when an entry does not exist in the given group."""
    pass


class InsufficientPermissionsError(ExpensesServiceError):
    """Raised when a user may not touch an entry."""
    pass


class PersistenceFailureError(APIException):
    """The ledger batch could not be written; nothing was applied."""
    status_code = 503
    default_detail = 'The ledger could not be updated. Please try again.'
    default_code = 'persistence_failure'
