"""
Split calculation.

Turns an entry amount into a share per member. Pure functions only;
nothing here touches the database except ``validate_participants``.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Mapping, Optional

from django.conf import settings

from apps.expenses.models import SplitType
from apps.groups.services.balance_ledger import CENT, ZERO, quantize_money
from apps.groups.services.exceptions import NotMemberError

from .exceptions import (
    InvalidAmountError,
    InvalidSplitError,
    NoParticipantsError,
    SplitMismatchError,
)


logger = logging.getLogger(__name__)

DEFAULT_SPLIT_TOLERANCE = Decimal('0.01')


def get_split_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, 'LEDGER_SPLIT_TOLERANCE', DEFAULT_SPLIT_TOLERANCE)))


def parse_amount(value) -> Decimal:
    """
    Coerce user input to a positive amount in whole cents.

    Raises:
        InvalidAmountError: If the value is not a number or not positive
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {value!r}")

    amount = quantize_money(amount)
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be at least {CENT}")
    return amount


def _unique(member_ids: Iterable) -> List[str]:
    seen = []
    for member_id in member_ids:
        member_id = str(member_id)
        if member_id not in seen:
            seen.append(member_id)
    return seen


def split_equally(amount: Decimal, participants: Iterable) -> Dict[str, Decimal]:
    """
    Split amount with cent precision (no rounding errors).

    Algorithm:
        1. Convert to cents: ``total_cents = int(amount * 100)``
        2. Base share: ``base = total_cents // N``
        3. Remainder: ``remainder = total_cents % N``
        4. First 'remainder' participants get ``base + 1`` cents
        5. Rest get 'base' cents

    Example:
        100.00 split among 3 people gives 33.34, 33.33, 33.33.

    Raises:
        NoParticipantsError: If participants is empty
    """
    members = _unique(participants)
    if not members:
        raise NoParticipantsError("At least one participant required")

    total_cents = int(quantize_money(amount) * 100)
    base_cents, remainder_cents = divmod(total_cents, len(members))

    shares = {}
    for i, member_id in enumerate(members):
        cents = base_cents + 1 if i < remainder_cents else base_cents
        shares[member_id] = (Decimal(cents) / Decimal(100)).quantize(CENT)

    return shares


def validate_exact_shares(amount: Decimal, explicit_shares: Mapping,
                          tolerance: Optional[Decimal] = None) -> Dict[str, Decimal]:
    """
    Check a caller-supplied share map against the entry amount.

    Shares may be zero. When the total is off by no more than the
    tolerance, the residual goes to the largest share (the first one in
    iteration order on ties), so the stored shares add up to ``amount``.

    Raises:
        InvalidSplitError: If a share is negative or not a number
        SplitMismatchError: If the total misses ``amount`` by more than the tolerance
    """
    if tolerance is None:
        tolerance = get_split_tolerance()

    shares = {}
    for member_id, value in explicit_shares.items():
        try:
            share = quantize_money(value)
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidSplitError(f"Invalid share for {member_id}: {value!r}")
        if not share.is_finite():
            raise InvalidSplitError(f"Invalid share for {member_id}: {value!r}")
        if share < 0:
            raise InvalidSplitError(f"Share for {member_id} cannot be negative")
        shares[str(member_id)] = shares.get(str(member_id), ZERO) + share

    total = sum(shares.values(), ZERO)
    if abs(total - amount) > tolerance:
        logger.warning("Exact split rejected: shares total %s, amount %s", total, amount)
        raise SplitMismatchError(amount, total)

    residual = amount - total
    if residual and shares:
        largest = max(shares, key=lambda member_id: shares[member_id])
        shares[largest] += residual

    return shares


def compute_shares(amount, policy, participants=None, explicit_shares=None) -> Dict[str, Decimal]:
    """
    Compute the share map of an entry.

    Args:
        amount: Entry total, positive
        policy: ``SplitType.EQUAL`` or ``SplitType.EXACT``
        participants: Member identities to split between (EQUAL)
        explicit_shares: Mapping of identity to share (EXACT)

    Returns:
        Dict of stringified identity to share; sums to ``amount``
    """
    amount = parse_amount(amount)

    if policy == SplitType.EQUAL:
        return split_equally(amount, participants or [])

    if policy == SplitType.EXACT:
        if not explicit_shares:
            raise InvalidSplitError("Exact split requires a share for each member")
        return validate_exact_shares(amount, explicit_shares)

    raise InvalidSplitError(f"Unknown split type: {policy!r}")


def validate_participants(group, member_ids: Iterable) -> None:
    """
    Raises:
        NotMemberError: If any identity is not a member of the group
    """
    members = set(group.member_ids())
    outsiders = [str(member_id) for member_id in member_ids if str(member_id) not in members]
    if outsiders:
        raise NotMemberError(f"Not members of group {group.id}: {', '.join(outsiders)}")
