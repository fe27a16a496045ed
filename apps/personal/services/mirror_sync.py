"""
Personal mirror sync.

Keeps the acting user's personal log in step with the group entries they
write. Callers run these functions inside the same ``transaction.atomic()``
block as the group-side write, so a failure here rolls both back.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from apps.accounts.models import User
from apps.personal.models import PersonalExpense


logger = logging.getLogger(__name__)

SHARED_CATEGORY = 'Shared'
SETTLEMENT_CATEGORY = 'Settlement'
INCOME_CATEGORY = 'Income'

ZERO = Decimal('0.00')


def find_mirror(*, user: User, shared_expense_id: UUID) -> Optional[PersonalExpense]:
    return (
        PersonalExpense.objects
        .filter(user=user, shared_expense_id=shared_expense_id)
        .first()
    )


def _display_name(user_id) -> str:
    user = User.objects.filter(id=user_id).first()
    return user.get_display_name() if user else 'Unknown'


def build_mirror_fields(*, acting_user: User, expense) -> Optional[dict]:
    """
    Personal log fields for the acting user's view of a group entry.

    Returns:
        Dict of PersonalExpense field values, or None when the user neither
        paid for nor consumed anything in the entry
    """
    group_name = expense.group.name
    is_payer = str(expense.paid_by_id) == str(acting_user.id)
    own_share = expense.share_for(acting_user.id)

    if expense.is_settlement:
        receiver_id = next(iter(expense.share_map()), None)
        if is_payer:
            fields = {
                'amount': expense.amount,
                'category': SETTLEMENT_CATEGORY,
                'description': f"Paid {_display_name(receiver_id)} in {group_name}",
            }
        elif receiver_id == str(acting_user.id):
            fields = {
                'amount': -expense.amount,
                'category': INCOME_CATEGORY,
                'description': f"Received from {expense.paid_by.get_display_name()} in {group_name}",
            }
        else:
            return None
        fields['recoverable_amount'] = ZERO

    elif is_payer:
        fields = {
            'amount': expense.amount,
            'category': SHARED_CATEGORY,
            'description': f"Paid for {expense.description} ({group_name})",
            'recoverable_amount': expense.amount - own_share,
        }
    elif own_share > 0:
        fields = {
            'amount': own_share,
            'category': SHARED_CATEGORY,
            'description': f"Owe {expense.paid_by.get_display_name()} for {expense.description}",
            'recoverable_amount': ZERO,
        }
    else:
        return None

    fields.update({
        'date': expense.date,
        'is_shared': True,
        'shared_group_id': expense.group_id,
        'shared_expense_id': expense.id,
    })
    return fields


def sync_mirror(*, acting_user: User, expense) -> Optional[PersonalExpense]:
    """
    Create, update or delete the acting user's mirror of a group entry.

    Returns:
        The mirror after the sync, or None when the user has no part in
        the entry (any previous mirror is deleted)
    """
    fields = build_mirror_fields(acting_user=acting_user, expense=expense)
    mirror = find_mirror(user=acting_user, shared_expense_id=expense.id)

    if fields is None:
        if mirror is not None:
            mirror.delete()
            logger.info("Removed mirror of entry %s for user %s", expense.id, acting_user.id)
        return None

    if mirror is None:
        mirror = PersonalExpense.objects.create(user=acting_user, **fields)
        logger.info("Created mirror %s of entry %s for user %s", mirror.id, expense.id, acting_user.id)
        return mirror

    for name, value in fields.items():
        setattr(mirror, name, value)
    mirror.save()
    return mirror


def revert_mirror(*, shared_expense_id: UUID) -> int:
    """Delete every mirror that references the entry. Returns the count."""
    deleted, _ = PersonalExpense.objects.filter(shared_expense_id=shared_expense_id).delete()
    if deleted:
        logger.info("Reverted %d mirror(s) of entry %s", deleted, shared_expense_id)
    return deleted


def refresh_mirrors(*, expense) -> int:
    """
    Bring every existing mirror of an edited entry in line with it.

    Each owner's mirror is rebuilt from that owner's view of the entry, or
    deleted when the owner no longer pays for or consumes anything in it.
    No mirror is ever created here.

    Returns:
        Number of mirrors updated (deleted ones are not counted)
    """
    updated = 0
    mirrors = PersonalExpense.objects.filter(shared_expense_id=expense.id).select_related('user')
    for mirror in mirrors:
        fields = build_mirror_fields(acting_user=mirror.user, expense=expense)
        if fields is None:
            mirror.delete()
            logger.info("Removed mirror of entry %s for user %s", expense.id, mirror.user_id)
            continue

        for name, value in fields.items():
            setattr(mirror, name, value)
        mirror.save()
        updated += 1
    return updated
