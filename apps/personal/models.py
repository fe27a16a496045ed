from django.db import models
from decimal import Decimal
import uuid


class PersonalExpense(models.Model):
    """
    A line in a user's personal expense log.

    Negative amounts are income. Mirrors of group entries carry the group
    and entry identities as plain values so they outlive the source entry
    until explicitly reverted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='personal_expenses'
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True)
    date = models.DateField()

    # Mirror back-references
    is_shared = models.BooleanField(default=False)
    shared_group_id = models.UUIDField(null=True, blank=True)
    shared_expense_id = models.UUIDField(null=True, blank=True, db_index=True)
    recoverable_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'personal_expenses'
        indexes = [
            models.Index(fields=['user', 'date'], name='personal_user_date_idx'),
            models.Index(fields=['user', 'is_shared'], name='personal_user_shared_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.category}: {self.amount} ({self.user.email})"

    @property
    def is_income(self):
        return self.amount < 0
