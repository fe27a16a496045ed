"""
Settlement planning.

Reduces a group's balances to a short list of payments that, once made,
leave every member within a cent of zero. The plan is derived from the
current balances on every request and never stored.
"""

from decimal import Decimal
from typing import List, Mapping, NamedTuple
from uuid import UUID

from apps.groups.services.balance_ledger import get_balances, quantize_money


SETTLEMENT_EPSILON = Decimal('0.01')


class Transfer(NamedTuple):
    from_member: str
    to_member: str
    amount: Decimal


def plan_settlement(balances: Mapping) -> List[Transfer]:
    """
    Greedy two-cursor matching of debtors against creditors.

    Debtors are taken most negative first and creditors largest first.
    Sorting is stable, so members with equal balances keep the order of
    ``balances`` (join order for group snapshots). The input is not modified.

    Args:
        balances: Mapping of identity to signed balance

    Returns:
        List of transfers, at most ``debtors + creditors - 1`` long
    """
    debtors = []
    creditors = []
    for member_id, balance in balances.items():
        balance = quantize_money(balance)
        if balance < -SETTLEMENT_EPSILON:
            debtors.append([str(member_id), balance])
        elif balance > SETTLEMENT_EPSILON:
            creditors.append([str(member_id), balance])

    debtors.sort(key=lambda entry: entry[1])
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    transfers = []
    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        amount = min(-debtor[1], creditor[1])

        if amount >= SETTLEMENT_EPSILON:
            transfers.append(Transfer(debtor[0], creditor[0], amount))

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < SETTLEMENT_EPSILON:
            i += 1
        if abs(creditor[1]) < SETTLEMENT_EPSILON:
            j += 1

    return transfers


def settlement_plan_for_group(*, group_id: UUID) -> List[Transfer]:
    return plan_settlement(get_balances(group_id=group_id))
