from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class ExpenseKind(models.TextChoices):
    EXPENSE = 'expense', 'Expense'
    SETTLEMENT = 'settlement', 'Settlement'


class SplitType(models.TextChoices):
    EQUAL = 'equal', 'Equal'
    EXACT = 'exact', 'Exact'


class SharedExpense(models.Model):
    """
    One ledger entry of a group: a shared expense or a settlement.

    A settlement is stored with the payer as ``paid_by`` and a single share
    belonging to the receiver.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    kind = models.CharField(max_length=20, choices=ExpenseKind.choices, default=ExpenseKind.EXPENSE)

    description = models.CharField(max_length=255)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    paid_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='expenses_paid'
    )
    date = models.DateField()
    split_type = models.CharField(max_length=10, choices=SplitType.choices, default=SplitType.EQUAL)

    # Members of the group when the entry was written
    member_ids = models.JSONField(default=list)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_recorded'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shared_expenses'
        indexes = [
            models.Index(fields=['group', 'date'], name='expense_group_date_idx'),
            models.Index(fields=['group', 'kind'], name='expense_group_kind_idx'),
            models.Index(fields=['paid_by', 'date'], name='expense_payer_date_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.description} - {self.amount} ({self.get_kind_display()})"

    @property
    def is_settlement(self):
        return self.kind == ExpenseKind.SETTLEMENT

    def share_map(self):
        """Shares keyed by stringified identity."""
        return {str(share.user_id): share.amount for share in self.shares.all()}

    def share_for(self, member_id):
        return self.share_map().get(str(member_id), Decimal('0.00'))


class ExpenseShare(models.Model):
    """The part of a ledger entry owed by one member."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    expense = models.ForeignKey(
        SharedExpense,
        on_delete=models.CASCADE,
        related_name='shares'
    )
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='expense_shares'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'expense_shares'
        unique_together = [['expense', 'user']]
        indexes = [
            models.Index(fields=['user'], name='expense_share_user_idx'),
        ]
        ordering = ['id']

    def __str__(self):
        return f"{self.user.email}: {self.amount}"
