"""
Membership management service.

Handles group membership operations with concurrency protection.
"""

import logging
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership

from .balance_ledger import CENT
from .exceptions import (
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    CannotRemoveCreatorError,
    InsufficientPermissionsError,
    OutstandingBalanceError,
)


logger = logging.getLogger(__name__)


@transaction.atomic
def add_member(
    *,
    group_id: UUID,
    user_id: UUID,
    added_by: User
) -> GroupMembership:
    """
    Add a user to a group with a zero balance.

    Args:
        group_id: UUID of the group
        user_id: UUID of the user to add
        added_by: Member performing the addition

    Returns:
        Created GroupMembership instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If added_by is not a member
        NotMemberError: If user_id doesn't match an active user
        AlreadyMemberError: If the user is already in the group
    """
    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(added_by):
        raise InsufficientPermissionsError("Only group members can add members")

    try:
        user = User.objects.get(id=user_id, is_active=True)
    except User.DoesNotExist:
        raise NotMemberError(f"User {user_id} does not exist")

    if group.has_member(user):
        raise AlreadyMemberError(f"User is already a member of {group.name}")

    try:
        with transaction.atomic():
            membership = GroupMembership.objects.create(user=user, group=group)
    except IntegrityError:
        raise AlreadyMemberError(f"User is already a member of {group.name}")

    logger.info("User %s added to group %s by %s", user.id, group.id, added_by.id)
    return membership


@transaction.atomic
def remove_member(
    *,
    group_id: UUID,
    user_id: UUID,
    removed_by: User
) -> None:
    """
    Remove a member from a group.

    A member whose balance is not settled (outside one cent of zero) cannot
    be removed, otherwise their debt or credit would silently vanish from
    the group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If removed_by is not a member
        CannotRemoveCreatorError: If trying to remove the creator
        NotMemberError: If target user is not a member
        OutstandingBalanceError: If the member still owes or is owed money
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(removed_by):
        raise InsufficientPermissionsError("Only group members can remove members")

    if str(group.created_by_id) == str(user_id):
        raise CannotRemoveCreatorError("Cannot remove the group creator")

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(group=group, user_id=user_id)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this group")

    if abs(membership.balance) > CENT:
        raise OutstandingBalanceError(
            f"Member still has an unsettled balance of {membership.balance}"
        )

    membership.delete()
    logger.info("User %s removed from group %s by %s", user_id, group.id, removed_by.id)


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMembership]:
    """
    Get all members of a group in join order.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    return (
        GroupMembership.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('joined_at', 'id')
    )
