"""
Balance ledger service.

Every group member carries a signed running balance (positive: owed to
them, negative: they owe). Balances only move through ``apply_delta``,
which issues one atomic ``F('balance') + delta`` increment per member, so
concurrent writers to the same group never overwrite each other.

Invariant: each delta map produced here sums to zero, so the balances of
a group always sum to zero.
"""

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping
from uuid import UUID

from django.db import transaction
from django.db.models import F, Sum

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership

from .exceptions import GroupNotFoundError, NotMemberError


logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def quantize_money(value) -> Decimal:
    """Round a number to whole cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def expense_deltas(amount, paid_by_id, shares: Mapping) -> Dict[str, Decimal]:
    """
    Balance changes caused by one ledger entry.

    The payer is credited the full amount once; every member with a
    positive share is debited that share. A settlement is the same shape
    with a single share belonging to the receiver.

    Args:
        amount: Total value of the entry
        paid_by_id: Identity of the member who fronted the money
        shares: Mapping of identity to owed share

    Returns:
        Dict of stringified identity to signed delta (sums to zero when
        the shares sum to the amount)
    """
    deltas = defaultdict(lambda: ZERO)
    deltas[str(paid_by_id)] += amount
    for member_id, share in shares.items():
        if share > 0:
            deltas[str(member_id)] -= share
    return dict(deltas)


def negate_deltas(deltas: Mapping) -> Dict[str, Decimal]:
    return {member_id: -delta for member_id, delta in deltas.items()}


def merge_deltas(*delta_maps: Mapping) -> Dict[str, Decimal]:
    """Sum several delta maps, dropping members whose net change is zero."""
    merged = defaultdict(lambda: ZERO)
    for deltas in delta_maps:
        for member_id, delta in deltas.items():
            merged[str(member_id)] += delta
    return {member_id: delta for member_id, delta in merged.items() if delta != 0}


def apply_delta(*, group_id: UUID, member_deltas: Mapping) -> None:
    """
    Apply signed balance changes to group members.

    Each member is updated with a single atomic increment; the balance map
    is never read and written back as a whole. Runs in a savepoint so a
    failure leaves the caller's transaction untouched.

    Args:
        group_id: UUID of the group
        member_deltas: Mapping of identity to signed change

    Raises:
        NotMemberError: If a delta targets someone outside the group
    """
    changes = {str(k): v for k, v in member_deltas.items() if v != 0}
    if not changes:
        return

    with transaction.atomic():
        for member_id, delta in changes.items():
            updated = (
                GroupMembership.objects
                .filter(group_id=group_id, user_id=member_id)
                .update(balance=F('balance') + delta)
            )
            if not updated:
                raise NotMemberError(f"User {member_id} is not a member of group {group_id}")

    logger.debug("Applied balance deltas to group %s: %s", group_id, changes)


def get_balances(*, group_id: UUID) -> Dict[str, Decimal]:
    """
    Current balances of a group in join order.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    memberships = GroupMembership.objects.filter(group_id=group_id).order_by('joined_at', 'id')
    return {str(m.user_id): m.balance for m in memberships}


def recompute_balances(*, group_id: UUID) -> Dict[str, Decimal]:
    """
    Rebuild balances from the group's full entry history.

    Current members start at zero; identities that only appear in history
    (e.g. removed members) are included too.

    Returns:
        Dict of stringified identity to recomputed balance
    """
    from apps.expenses.models import SharedExpense

    balances = {member_id: ZERO for member_id in get_balances(group_id=group_id)}

    entries = SharedExpense.objects.filter(group_id=group_id).prefetch_related('shares')
    for entry in entries:
        for member_id, delta in expense_deltas(entry.amount, entry.paid_by_id, entry.share_map()).items():
            balances[member_id] = balances.get(member_id, ZERO) + delta

    return balances


@transaction.atomic
def rebuild_balances(*, group_id: UUID) -> Dict[str, Decimal]:
    """
    Reconcile stored balances against the entry history.

    Membership rows are locked first, so in-flight increments finish
    before the history is read. Corrections are written as increments.

    Returns:
        Dict of identity to the correction applied (empty when consistent)
    """
    memberships = list(
        GroupMembership.objects
        .select_for_update()
        .filter(group_id=group_id)
        .order_by('joined_at', 'id')
    )
    if not memberships and not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    expected = recompute_balances(group_id=group_id)
    corrections = {}
    for membership in memberships:
        member_id = str(membership.user_id)
        difference = expected.get(member_id, ZERO) - membership.balance
        if difference != 0:
            corrections[member_id] = difference

    if corrections:
        logger.warning("Balance drift in group %s corrected: %s", group_id, corrections)
        apply_delta(group_id=group_id, member_deltas=corrections)

    return corrections


def get_user_total_balance(*, user: User) -> Decimal:
    """Sum of a user's balances across all of their groups."""
    total = GroupMembership.objects.filter(user=user).aggregate(total=Sum('balance'))['total']
    return total or ZERO
