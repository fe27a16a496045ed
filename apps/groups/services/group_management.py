"""
Group management service.

Handles group CRUD operations with proper transaction safety.
"""

import logging
from typing import Iterable, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import OuterRef, Prefetch, QuerySet, Subquery

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership

from .exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
    NotMemberError,
)


logger = logging.getLogger(__name__)


@transaction.atomic
def create_group(
    *,
    name: str,
    created_by: User,
    member_ids: Iterable[UUID] = ()
) -> Group:
    """
    Create a new group with the creator and the selected people as members.

    Every member starts with a zero balance.

    Args:
        name: Group name
        created_by: User creating the group (always a member)
        member_ids: Additional members to add

    Returns:
        Created Group instance

    Raises:
        NotMemberError: If a member ID doesn't match an active user
    """
    group = Group.objects.create(name=name.strip(), created_by=created_by)

    ordered_ids = [created_by.id]
    for member_id in member_ids:
        if str(member_id) not in {str(existing) for existing in ordered_ids}:
            ordered_ids.append(member_id)

    users = {str(u.id): u for u in User.objects.filter(id__in=ordered_ids, is_active=True)}
    for member_id in ordered_ids:
        user = users.get(str(member_id))
        if user is None:
            raise NotMemberError(f"User {member_id} does not exist")
        GroupMembership.objects.create(user=user, group=group)

    logger.info("Group %s created by %s with %d members", group.id, created_by.id, len(ordered_ids))
    return group


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get a group by ID with optimized queries.

    Args:
        group_id: UUID of the group

    Returns:
        Group instance

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return (
            Group.objects
            .select_related('created_by')
            .prefetch_related(
                Prefetch(
                    'memberships',
                    queryset=GroupMembership.objects.select_related('user')
                )
            )
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def list_user_groups(*, user: User) -> QuerySet[Group]:
    """
    Groups the user belongs to, each annotated with ``my_balance``.
    """
    my_balance = (
        GroupMembership.objects
        .filter(group=OuterRef('pk'), user=user)
        .values('balance')[:1]
    )
    return (
        Group.objects
        .filter(memberships__user=user)
        .annotate(my_balance=Subquery(my_balance))
        .select_related('created_by')
        .distinct()
    )


@transaction.atomic
def rename_group(
    *,
    group_id: UUID,
    user: User,
    name: Optional[str] = None
) -> Group:
    """
    Rename a group. Any member may rename.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not a member
    """
    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(user):
        raise InsufficientPermissionsError("Only group members can rename the group")

    if name is not None and name.strip() and name.strip() != group.name:
        group.name = name.strip()
        group.save(update_fields=['name', 'updated_at'])

    return group


@transaction.atomic
def delete_group(*, group_id: UUID, user: User) -> None:
    """
    Delete a group (creator only).

    Cascading deletes remove memberships and the group's ledger entries.
    Personal mirror entries are kept; they only reference the group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not the creator
    """
    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.is_creator(user):
        raise InsufficientPermissionsError("Only the group creator can delete the group")

    group.delete()
    logger.info("Group %s deleted by %s", group_id, user.id)
