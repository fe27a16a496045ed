"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    CannotRemoveCreatorError,
    OutstandingBalanceError,
    InsufficientPermissionsError,
)

from .group_management import (
    create_group,
    rename_group,
    delete_group,
    get_group_by_id,
    list_user_groups,
)

from .membership_management import (
    add_member,
    remove_member,
    get_group_members,
)

from .balance_ledger import (
    quantize_money,
    expense_deltas,
    negate_deltas,
    merge_deltas,
    apply_delta,
    get_balances,
    recompute_balances,
    rebuild_balances,
    get_user_total_balance,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'AlreadyMemberError',
    'NotMemberError',
    'CannotRemoveCreatorError',
    'OutstandingBalanceError',
    'InsufficientPermissionsError',

    # Group Management
    'create_group',
    'rename_group',
    'delete_group',
    'get_group_by_id',
    'list_user_groups',

    # Membership Management
    'add_member',
    'remove_member',
    'get_group_members',

    # Balance Ledger
    'quantize_money',
    'expense_deltas',
    'negate_deltas',
    'merge_deltas',
    'apply_delta',
    'get_balances',
    'recompute_balances',
    'rebuild_balances',
    'get_user_total_balance',
]
