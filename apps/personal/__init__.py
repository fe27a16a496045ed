"""
Personal App - Personal Expense Log

Each user's own spending log. Shared group entries are mirrored here so
personal totals include a user's part of group spending; money received
in a settlement is logged as a negative amount (income).
"""
