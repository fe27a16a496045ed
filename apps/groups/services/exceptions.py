"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class GroupsServiceError(Exception):
    """Base exception for all groups service errors."""
    pass


class GroupNotFoundError(GroupsServiceError):
    """Raised when a group does not exist or is inaccessible."""
    pass


class AlreadyMemberError(GroupsServiceError):
    """Raised when adding someone who is already in the group."""
    pass


class NotMemberError(GroupsServiceError):
    """Raised when an identity is not a member of the group."""
    pass


class CannotRemoveCreatorError(GroupsServiceError):
    """Raised when attempting to remove the group creator."""
    pass


class OutstandingBalanceError(GroupsServiceError):
    """Raised when removing a member whose balance is not settled."""
    pass


class InsufficientPermissionsError(GroupsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass
