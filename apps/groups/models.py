# ==========================================
# apps/groups/models.py
# ==========================================

from decimal import Decimal
from django.db import models
import uuid


class Group(models.Model):
    """A set of people sharing expenses."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    created_by = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='created_groups')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='groups_creator_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def has_member(self, user):
        return self.memberships.filter(user=user).exists()

    def is_creator(self, user):
        return self.created_by_id == user.id

    def member_ids(self):
        """Member identities in join order."""
        return [str(user_id) for user_id in self.memberships.values_list('user_id', flat=True)]

    @property
    def balances(self):
        """Snapshot of member balances keyed by stringified identity."""
        return {str(m.user_id): m.balance for m in self.memberships.all()}


class GroupMembership(models.Model):
    """
    A member of a group together with their running balance.

    Positive balance: the group owes this member. Negative: they owe the
    group. Only ever changed through atomic increments in the balance ledger.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='group_memberships')
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='memberships')
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_memberships'
        unique_together = [['user', 'group']]
        indexes = [
            models.Index(fields=['group', 'joined_at'], name='membership_group_joined_idx'),
            models.Index(fields=['user', 'joined_at'], name='membership_user_joined_idx'),
        ]
        ordering = ['joined_at', 'id']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.group.name} ({self.balance})"
