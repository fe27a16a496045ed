"""
Expenses App - Shared Ledger Entries

Records expenses and settlements inside a group, splits them between
members, keeps member balances current and plans the minimal set of
payments that clears a group.

Architecture:
- Models: SharedExpense, ExpenseShare
- Services: split_calculation, expense_records, settlement_planning
- Views: ExpenseViewSet nested under /api/groups/{group_id}/expenses/
"""
