from django.contrib import admin
from .models import PersonalExpense


@admin.register(PersonalExpense)
class PersonalExpenseAdmin(admin.ModelAdmin):
    list_display = ['user', 'amount', 'category', 'description', 'date', 'is_shared']
    list_filter = ['is_shared', 'category', 'date']
    search_fields = ['user__email', 'description', 'category']
    readonly_fields = ['shared_group_id', 'shared_expense_id', 'created_at', 'updated_at']
    date_hierarchy = 'date'
