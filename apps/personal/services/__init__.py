from .mirror_sync import (
    INCOME_CATEGORY,
    SETTLEMENT_CATEGORY,
    SHARED_CATEGORY,
    build_mirror_fields,
    find_mirror,
    refresh_mirrors,
    revert_mirror,
    sync_mirror,
)
from .personal_log import list_personal_expenses, summarize_personal_expenses

__all__ = [
    'INCOME_CATEGORY',
    'SETTLEMENT_CATEGORY',
    'SHARED_CATEGORY',
    'build_mirror_fields',
    'find_mirror',
    'refresh_mirrors',
    'revert_mirror',
    'sync_mirror',
    'list_personal_expenses',
    'summarize_personal_expenses',
]
