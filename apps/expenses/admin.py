# ==========================================
# apps/expenses/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import SharedExpense, ExpenseShare, ExpenseKind


class ExpenseShareInline(admin.TabularInline):
    """Inline admin for shares within an entry."""
    model = ExpenseShare
    extra = 0
    fields = ['user', 'amount']
    readonly_fields = ['user', 'amount']

    def has_add_permission(self, request, obj=None):
        """Shares are written by the expense services only."""
        return False


@admin.register(SharedExpense)
class SharedExpenseAdmin(admin.ModelAdmin):
    """
    Read-only admin for ledger entries.

    Editing here would bypass the balance ledger, so entries can only be
    inspected.
    """

    list_display = [
        'description',
        'kind_badge',
        'group',
        'paid_by',
        'amount',
        'split_type',
        'date',
        'created_at',
    ]

    list_filter = ['kind', 'split_type', 'date', 'created_at']

    search_fields = [
        'description',
        'group__name',
        'paid_by__email',
        'paid_by__display_name',
    ]

    readonly_fields = [
        'id',
        'group',
        'kind',
        'description',
        'amount',
        'paid_by',
        'date',
        'split_type',
        'member_ids',
        'created_by',
        'created_at',
        'updated_at',
    ]

    inlines = [ExpenseShareInline]
    date_hierarchy = 'date'

    def kind_badge(self, obj):
        """Display entry kind as colored badge."""
        colors = {
            ExpenseKind.EXPENSE: ('#E5C49A', '#2C1810'),
            ExpenseKind.SETTLEMENT: ('#6B8E5E', 'white'),
        }
        bg, fg = colors.get(obj.kind, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_kind_display()
        )
    kind_badge.short_description = 'Kind'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
