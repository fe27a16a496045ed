"""
Personal expense log queries.
"""

from decimal import Decimal

from django.db.models import Q, QuerySet, Sum

from apps.accounts.models import User
from apps.personal.models import PersonalExpense


def list_personal_expenses(*, user: User, shared_only: bool = False) -> QuerySet:
    """User's personal log, newest first."""
    queryset = PersonalExpense.objects.filter(user=user)
    if shared_only:
        queryset = queryset.filter(is_shared=True)
    return queryset.order_by('-date', '-created_at')


def summarize_personal_expenses(*, user: User, date_from=None, date_to=None) -> dict:
    """
    Totals for a user's log over an optional date range.

    Negative amounts count as income. ``net_spent`` is what the user is
    out of pocket once recoverable amounts are paid back.
    """
    queryset = PersonalExpense.objects.filter(user=user)
    if date_from is not None:
        queryset = queryset.filter(date__gte=date_from)
    if date_to is not None:
        queryset = queryset.filter(date__lte=date_to)

    totals = queryset.aggregate(
        spent=Sum('amount', filter=Q(amount__gt=0)),
        income=Sum('amount', filter=Q(amount__lt=0)),
        recoverable=Sum('recoverable_amount'),
    )
    spent = totals['spent'] or Decimal('0.00')
    income = -(totals['income'] or Decimal('0.00'))
    recoverable = totals['recoverable'] or Decimal('0.00')

    return {
        'total_spent': spent,
        'total_income': income,
        'total_recoverable': recoverable,
        'net_spent': spent - recoverable,
    }
