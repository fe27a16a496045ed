"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserNotFoundError,
)
from .user_directory import (
    get_user_by_id,
    resolve_display_names,
    search_users,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserNotFoundError',
    # Services
    'get_user_by_id',
    'resolve_display_names',
    'search_users',
]
