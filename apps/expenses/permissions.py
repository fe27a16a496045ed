"""
Custom permission classes for the expenses app.

Entries are always reached through their group
(``/api/groups/{group_id}/expenses/``), so access is decided by group
membership.
"""
from rest_framework.exceptions import NotFound
from rest_framework.permissions import BasePermission


class IsGroupMemberForExpense(BasePermission):
    """
    Allows access if the user is a member of the group in the URL.

    Unknown groups answer 404 instead of 403.

    Usage:
        class ExpenseViewSet(viewsets.GenericViewSet):
            permission_classes = [IsAuthenticated, IsGroupMemberForExpense]
    """

    message = 'You must be a member of this group.'

    def has_permission(self, request, view):
        from apps.groups.models import Group

        group = Group.objects.filter(id=view.kwargs.get('group_id')).first()
        if group is None:
            raise NotFound('Group not found.')
        return group.has_member(request.user)

    def has_object_permission(self, request, view, obj):
        return obj.group.has_member(request.user)
