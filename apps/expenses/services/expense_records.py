"""
Expense record store.

Every write here is one atomic batch: the ledger entry and its shares,
the balance changes it causes and the acting user's personal mirror are
committed together or not at all. A database error anywhere in the batch
rolls everything back and surfaces as ``PersistenceFailureError``.
"""

import logging
from contextlib import contextmanager
from datetime import date as date_type
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional
from uuid import UUID

from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.expenses.models import ExpenseKind, ExpenseShare, SharedExpense, SplitType
from apps.groups.models import Group
from apps.groups.services.balance_ledger import (
    ZERO,
    apply_delta,
    expense_deltas,
    merge_deltas,
    negate_deltas,
)
from apps.groups.services.group_management import get_group_by_id
from apps.personal.services.mirror_sync import refresh_mirrors, revert_mirror, sync_mirror

from .exceptions import (
    ExpenseNotFoundError,
    InsufficientPermissionsError,
    InvalidSettlementError,
    InvalidSplitError,
    PersistenceFailureError,
    SettlementNotEditableError,
)
from .split_calculation import compute_shares, parse_amount, validate_participants


logger = logging.getLogger(__name__)

SETTLEMENT_DESCRIPTION = 'Settlement'


@contextmanager
def ledger_batch(action: str, group_id):
    """
    Atomic block for one ledger write.

    Raises:
        PersistenceFailureError: If the database rejects any write in the batch
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as e:
        logger.exception("Ledger batch '%s' failed for group %s", action, group_id)
        raise PersistenceFailureError(detail=str(e))


def _get_member_group(group_id: UUID, user: User) -> Group:
    group = get_group_by_id(group_id=group_id)
    if not group.has_member(user):
        raise InsufficientPermissionsError("You must be a member of this group")
    return group


def _ordered_participants(group: Group, participants: Iterable) -> List[str]:
    """
    Participants in join order.

    Unknown identities are kept at the end so membership validation can
    report them.
    """
    requested = [str(member_id) for member_id in participants]
    members = group.member_ids()
    ordered = [member_id for member_id in members if member_id in requested]
    ordered += [member_id for member_id in requested if member_id not in members and member_id not in ordered]
    return ordered


def _resolve_shares(group: Group, amount: Decimal, split_type: str,
                    participants=None, exact_shares: Optional[Mapping] = None) -> dict:
    if split_type == SplitType.EQUAL:
        if participants is None:
            participants = group.member_ids()
        participants = _ordered_participants(group, participants)
        validate_participants(group, participants)
        return compute_shares(amount, SplitType.EQUAL, participants=participants)

    if split_type == SplitType.EXACT:
        exact_shares = exact_shares or {}
        validate_participants(group, exact_shares.keys())
        ordered = {
            member_id: exact_shares[key]
            for member_id in group.member_ids()
            for key in exact_shares
            if str(key) == member_id
        }
        return compute_shares(amount, SplitType.EXACT, explicit_shares=ordered)

    raise InvalidSplitError(f"Unknown split type: {split_type!r}")


def _write_shares(expense: SharedExpense, shares: Mapping) -> None:
    ExpenseShare.objects.bulk_create([
        ExpenseShare(expense=expense, user_id=member_id, amount=share)
        for member_id, share in shares.items()
    ])


def record_expense(
    *,
    group_id: UUID,
    acting_user: User,
    description: str,
    amount,
    paid_by_id: UUID,
    date: Optional[date_type] = None,
    split_type: str = SplitType.EQUAL,
    participants: Optional[Iterable[UUID]] = None,
    exact_shares: Optional[Mapping] = None
) -> SharedExpense:
    """
    Record a shared expense and update balances.

    Args:
        group_id: UUID of the group
        acting_user: Member writing the entry (gets a personal mirror)
        description: What the money was spent on
        amount: Total paid, positive
        paid_by_id: Member who paid
        date: Date of the expense (defaults to today)
        split_type: ``SplitType.EQUAL`` or ``SplitType.EXACT``
        participants: Members sharing an equal split (None = everyone)
        exact_shares: Mapping of member to share for an exact split

    Returns:
        Created SharedExpense

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If acting_user is not a member
        NotMemberError: If payer or a participant is not a member
        InvalidAmountError, NoParticipantsError, InvalidSplitError,
        SplitMismatchError: If the split is invalid (nothing is written)
        PersistenceFailureError: If the batch could not be written
    """
    group = _get_member_group(group_id, acting_user)
    amount = parse_amount(amount)
    validate_participants(group, [paid_by_id])
    shares = _resolve_shares(group, amount, split_type, participants, exact_shares)

    with ledger_batch('record', group.id):
        expense = SharedExpense.objects.create(
            group=group,
            kind=ExpenseKind.EXPENSE,
            description=description.strip(),
            amount=amount,
            paid_by_id=paid_by_id,
            date=date or timezone.localdate(),
            split_type=split_type,
            member_ids=group.member_ids(),
            created_by=acting_user,
        )
        _write_shares(expense, shares)
        apply_delta(group_id=group.id, member_deltas=expense_deltas(amount, paid_by_id, shares))
        sync_mirror(acting_user=acting_user, expense=expense)

    logger.info("Expense %s recorded in group %s (%s)", expense.id, group.id, expense.amount)
    return expense


def update_expense(
    *,
    group_id: UUID,
    expense_id: UUID,
    acting_user: User,
    description: Optional[str] = None,
    amount=None,
    paid_by_id: Optional[UUID] = None,
    date: Optional[date_type] = None,
    split_type: Optional[str] = None,
    participants: Optional[Iterable[UUID]] = None,
    exact_shares: Optional[Mapping] = None
) -> SharedExpense:
    """
    Edit an expense and move balances by the difference.

    The entry row is locked while the old contribution is read, then
    ``-old + new`` is applied as one merged delta. Fields left as None keep
    their current value. Without new participants an equal split reuses
    the previous participants; without new shares an exact split reuses
    the previous shares. Existing personal mirrors are rewritten to match;
    none are created.

    Raises:
        ExpenseNotFoundError: If the entry is not in the group
        SettlementNotEditableError: If the entry is a settlement
        (plus the validation errors of ``record_expense``)
    """
    group = _get_member_group(group_id, acting_user)

    with ledger_batch('update', group.id):
        expense = _lock_expense(group.id, expense_id)
        if expense.is_settlement:
            raise SettlementNotEditableError("Settlements cannot be edited")

        old_shares = expense.share_map()
        old_deltas = expense_deltas(expense.amount, expense.paid_by_id, old_shares)

        new_amount = parse_amount(amount) if amount is not None else expense.amount
        new_payer_id = paid_by_id or expense.paid_by_id
        validate_participants(group, [new_payer_id])

        new_split_type = split_type or expense.split_type
        if new_split_type == SplitType.EQUAL and participants is None:
            if expense.split_type == SplitType.EQUAL:
                participants = [member_id for member_id, share in old_shares.items() if share > 0]
            else:
                participants = group.member_ids()
        if new_split_type == SplitType.EXACT and exact_shares is None:
            if expense.split_type != SplitType.EXACT:
                raise InvalidSplitError("Exact split requires a share for each member")
            exact_shares = old_shares

        new_shares = _resolve_shares(group, new_amount, new_split_type, participants, exact_shares)
        new_deltas = expense_deltas(new_amount, new_payer_id, new_shares)
        apply_delta(group_id=group.id, member_deltas=merge_deltas(negate_deltas(old_deltas), new_deltas))

        if description is not None and description.strip():
            expense.description = description.strip()
        if date is not None:
            expense.date = date
        expense.amount = new_amount
        expense.paid_by_id = new_payer_id
        expense.split_type = new_split_type
        expense.member_ids = group.member_ids()
        expense.save()

        expense.shares.all().delete()
        _write_shares(expense, new_shares)
        refresh_mirrors(expense=expense)

    logger.info("Expense %s updated in group %s", expense.id, group.id)
    return expense


def delete_expense(*, group_id: UUID, expense_id: UUID, acting_user: User) -> None:
    """
    Delete an entry, reversing its effect on balances.

    Allowed for whoever recorded the entry, its payer and the group
    creator. Personal mirrors referencing the entry are removed in the
    same batch.

    Raises:
        ExpenseNotFoundError: If the entry is not in the group
        InsufficientPermissionsError: If acting_user may not delete it
        NotMemberError: If a member involved in the entry has left the group
        PersistenceFailureError: If the batch could not be written
    """
    group = _get_member_group(group_id, acting_user)

    with ledger_batch('delete', group.id):
        expense = _lock_expense(group.id, expense_id)
        allowed = (
            expense.created_by_id == acting_user.id
            or expense.paid_by_id == acting_user.id
            or group.is_creator(acting_user)
        )
        if not allowed:
            raise InsufficientPermissionsError("Only the recorder, the payer or the group creator can delete this entry")

        deltas = expense_deltas(expense.amount, expense.paid_by_id, expense.share_map())
        apply_delta(group_id=group.id, member_deltas=negate_deltas(deltas))
        expense.delete()
        revert_mirror(shared_expense_id=expense_id)

    logger.info("Entry %s deleted from group %s by %s", expense_id, group.id, acting_user.id)


def settle_up(
    *,
    group_id: UUID,
    acting_user: User,
    payer_id: UUID,
    receiver_id: UUID,
    amount,
    date: Optional[date_type] = None
) -> SharedExpense:
    """
    Record a payment from one member to another.

    The payer is credited and the receiver debited by ``amount``. The
    acting user's mirror is an expense for the payer and income (negative
    amount) for the receiver.

    Raises:
        InsufficientPermissionsError: If acting_user is neither payer nor receiver
        InvalidSettlementError: If payer and receiver are the same member
        InvalidAmountError: If amount is not positive
        NotMemberError: If payer or receiver is not a member
        PersistenceFailureError: If the batch could not be written
    """
    group = _get_member_group(group_id, acting_user)

    if str(payer_id) == str(receiver_id):
        raise InvalidSettlementError("Payer and receiver must be different members")
    if str(acting_user.id) not in (str(payer_id), str(receiver_id)):
        raise InsufficientPermissionsError("Only the payer or the receiver can record a settlement")

    amount = parse_amount(amount)
    validate_participants(group, [payer_id, receiver_id])
    shares = {str(receiver_id): amount}

    with ledger_batch('settle', group.id):
        expense = SharedExpense.objects.create(
            group=group,
            kind=ExpenseKind.SETTLEMENT,
            description=SETTLEMENT_DESCRIPTION,
            amount=amount,
            paid_by_id=payer_id,
            date=date or timezone.localdate(),
            split_type=SplitType.EXACT,
            member_ids=group.member_ids(),
            created_by=acting_user,
        )
        _write_shares(expense, shares)
        apply_delta(group_id=group.id, member_deltas=expense_deltas(amount, payer_id, shares))
        sync_mirror(acting_user=acting_user, expense=expense)

    logger.info("Settlement %s in group %s: %s -> %s (%s)", expense.id, group.id, payer_id, receiver_id, amount)
    return expense


def _lock_expense(group_id: UUID, expense_id: UUID) -> SharedExpense:
    expense = (
        SharedExpense.objects
        .select_for_update()
        .filter(group_id=group_id, id=expense_id)
        .first()
    )
    if expense is None:
        raise ExpenseNotFoundError(f"Entry {expense_id} not found in group {group_id}")
    return expense


def get_expense(*, group_id: UUID, expense_id: UUID) -> SharedExpense:
    """
    Raises:
        ExpenseNotFoundError: If the entry is not in the group
    """
    try:
        return (
            SharedExpense.objects
            .select_related('paid_by', 'group')
            .prefetch_related('shares')
            .get(group_id=group_id, id=expense_id)
        )
    except SharedExpense.DoesNotExist:
        raise ExpenseNotFoundError(f"Entry {expense_id} not found in group {group_id}")


def list_group_expenses(*, group_id: UUID, kind: Optional[str] = None) -> QuerySet[SharedExpense]:
    """Group entries, newest date first and newest creation first within a day."""
    queryset = SharedExpense.objects.filter(group_id=group_id)
    if kind:
        queryset = queryset.filter(kind=kind)
    return (
        queryset
        .select_related('paid_by', 'created_by')
        .prefetch_related('shares')
        .order_by('-date', '-created_at')
    )


def expense_impact_for(expense: SharedExpense, member_id) -> Decimal:
    """
    Net effect of one entry on a member: what they paid minus their share.

    Positive means the member lent money in this entry, negative means
    they borrowed.
    """
    paid = expense.amount if str(expense.paid_by_id) == str(member_id) else ZERO
    return paid - expense.share_for(member_id)
