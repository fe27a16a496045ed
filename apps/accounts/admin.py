from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count

from apps.groups.models import GroupMembership
from apps.groups.services.balance_ledger import get_user_total_balance
from .models import User


class MembershipInline(admin.TabularInline):
    """Groups the user belongs to, with their running balance in each."""

    model = GroupMembership
    fk_name = 'user'
    extra = 0
    can_delete = False
    fields = ['group', 'balance', 'joined_at']
    readonly_fields = ['group', 'balance', 'joined_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Ledger identities with their group memberships."""

    list_display = [
        'email',
        'display_name',
        'group_count',
        'is_active',
        'created_at',
    ]
    list_filter = ['is_active', 'is_staff']
    search_fields = ['email', 'display_name']
    ordering = ['-created_at']
    inlines = [MembershipInline]

    fieldsets = (
        (None, {'fields': ('email', 'display_name', 'password')}),
        ('Ledger', {'fields': ('total_balance',)}),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {'fields': ('created_at', 'last_login')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )
    readonly_fields = ['total_balance', 'created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']

    actions = ['deactivate_settled_users']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            membership_count=Count('group_memberships')
        )

    def group_count(self, obj):
        return obj.membership_count
    group_count.short_description = 'Groups'
    group_count.admin_order_field = 'membership_count'

    def total_balance(self, obj):
        """Net position across every group (positive: owed to the user)."""
        return get_user_total_balance(user=obj)
    total_balance.short_description = 'Total balance'

    @admin.action(description='Deactivate selected users (settled only)')
    def deactivate_settled_users(self, request, queryset):
        """Users with an open balance in any group are skipped."""
        unsettled = set(
            GroupMembership.objects.filter(user__in=queryset)
            .exclude(balance=0)
            .values_list('user_id', flat=True)
        )
        settled = queryset.filter(is_superuser=False).exclude(id__in=unsettled)
        count = settled.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} with open balances or superuser rights.'
        self.message_user(request, msg)
