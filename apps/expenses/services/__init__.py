"""
Expenses app services layer.

Split calculation and settlement planning are pure; the record store
owns every write to the ledger.
"""

from .exceptions import (
    ExpensesServiceError,
    InvalidAmountError,
    NoParticipantsError,
    InvalidSplitError,
    SplitMismatchError,
    InvalidSettlementError,
    SettlementNotEditableError,
    ExpenseNotFoundError,
    InsufficientPermissionsError,
    PersistenceFailureError,
)

from .split_calculation import (
    get_split_tolerance,
    parse_amount,
    split_equally,
    validate_exact_shares,
    compute_shares,
    validate_participants,
)

from .settlement_planning import (
    Transfer,
    plan_settlement,
    settlement_plan_for_group,
)

from .expense_records import (
    record_expense,
    update_expense,
    delete_expense,
    settle_up,
    get_expense,
    list_group_expenses,
    expense_impact_for,
)


__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'InvalidAmountError',
    'NoParticipantsError',
    'InvalidSplitError',
    'SplitMismatchError',
    'InvalidSettlementError',
    'SettlementNotEditableError',
    'ExpenseNotFoundError',
    'InsufficientPermissionsError',
    'PersistenceFailureError',

    # Split Calculation
    'get_split_tolerance',
    'parse_amount',
    'split_equally',
    'validate_exact_shares',
    'compute_shares',
    'validate_participants',

    # Settlement Planning
    'Transfer',
    'plan_settlement',
    'settlement_plan_for_group',

    # Expense Records
    'record_expense',
    'update_expense',
    'delete_expense',
    'settle_up',
    'get_expense',
    'list_group_expenses',
    'expense_impact_for',
]
