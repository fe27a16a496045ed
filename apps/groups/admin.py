# ==========================================
# apps/groups/admin.py
# ==========================================

from django.contrib import admin
from apps.groups.models import Group, GroupMembership


class GroupMembershipInline(admin.TabularInline):
    """Inline admin for group memberships."""
    model = GroupMembership
    extra = 0
    fields = ['user', 'balance', 'joined_at']
    readonly_fields = ['balance', 'joined_at']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = [
        'name',
        'created_by',
        'member_count',
        'created_at'
    ]
    list_filter = ['created_at']
    search_fields = ['name', 'created_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [GroupMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def member_count(self, obj):
        """Show number of members."""
        return obj.memberships.count()
    member_count.short_description = 'Members'

    actions = ['rebuild_selected_balances']

    def rebuild_selected_balances(self, request, queryset):
        """Reconcile balances of selected groups against their history."""
        from apps.groups.services import rebuild_balances

        corrected = 0
        for group in queryset:
            if rebuild_balances(group_id=group.id):
                corrected += 1
        self.message_user(request, f"Checked {queryset.count()} groups, corrected {corrected}")
    rebuild_selected_balances.short_description = "Rebuild balances from history"


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    """Admin interface for Group Memberships."""

    list_display = ['user', 'group', 'balance', 'joined_at']
    list_filter = ['joined_at']
    search_fields = ['user__email', 'group__name']
    readonly_fields = ['balance', 'joined_at']
    date_hierarchy = 'joined_at'
    ordering = ['-joined_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'group')
