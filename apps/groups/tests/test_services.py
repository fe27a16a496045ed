"""
Service layer unit tests for groups app.

Tests cover:
- Group and membership management
- Balance ledger arithmetic and conservation
- Reconciliation against the entry history
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from apps.expenses.services import record_expense, settle_up
from apps.groups.models import Group, GroupMembership
from apps.groups.services import (
    create_group,
    rename_group,
    delete_group,
    get_group_by_id,
    list_user_groups,
    add_member,
    remove_member,
    get_group_members,
    expense_deltas,
    negate_deltas,
    merge_deltas,
    apply_delta,
    get_balances,
    recompute_balances,
    rebuild_balances,
    get_user_total_balance,
)
from apps.groups.services.exceptions import (
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    CannotRemoveCreatorError,
    OutstandingBalanceError,
    InsufficientPermissionsError,
)


# =============================================================================
# Group Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupManagement:
    """Tests for group_management.py service functions."""

    def test_create_group_success(self, group_creator, member_user):
        """Creating a group adds the creator and the selected members."""
        group = create_group(name="  Flatmates ", created_by=group_creator, member_ids=[member_user.id])

        assert group.name == "Flatmates"
        assert group.created_by == group_creator
        assert group.member_ids() == [str(group_creator.id), str(member_user.id)]
        assert all(balance == 0 for balance in get_balances(group_id=group.id).values())

    def test_create_group_ignores_duplicate_members(self, group_creator, member_user):
        group = create_group(
            name="Flatmates",
            created_by=group_creator,
            member_ids=[member_user.id, member_user.id, group_creator.id],
        )

        assert GroupMembership.objects.filter(group=group).count() == 2

    def test_create_group_unknown_member(self, group_creator):
        with pytest.raises(NotMemberError):
            create_group(name="Flatmates", created_by=group_creator, member_ids=[uuid4()])

        assert not Group.objects.exists()

    def test_get_group_not_found(self):
        with pytest.raises(GroupNotFoundError):
            get_group_by_id(group_id=uuid4())

    def test_list_user_groups_annotates_balance(self, group, group_creator, member_user, non_member):
        record_expense(
            group_id=group.id,
            acting_user=group_creator,
            description='Fuel',
            amount=Decimal('90.00'),
            paid_by_id=group_creator.id,
        )

        groups = list(list_user_groups(user=member_user))

        assert groups == [group]
        assert groups[0].my_balance == Decimal('-30.00')
        assert list(list_user_groups(user=non_member)) == []

    def test_any_member_can_rename(self, group, member_user):
        renamed = rename_group(group_id=group.id, user=member_user, name='Long Weekend')

        assert renamed.name == 'Long Weekend'

    def test_non_member_cannot_rename(self, group, non_member):
        with pytest.raises(InsufficientPermissionsError):
            rename_group(group_id=group.id, user=non_member, name='Hijacked')

    def test_only_creator_can_delete(self, group, group_creator, member_user):
        with pytest.raises(InsufficientPermissionsError):
            delete_group(group_id=group.id, user=member_user)

        delete_group(group_id=group.id, user=group_creator)
        assert not Group.objects.filter(id=group.id).exists()


# =============================================================================
# Membership Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestMembershipManagement:
    """Tests for membership_management.py service functions."""

    def test_add_member_starts_at_zero(self, group, member_user, non_member):
        membership = add_member(group_id=group.id, user_id=non_member.id, added_by=member_user)

        assert membership.balance == Decimal('0.00')
        assert get_group_members(group_id=group.id).last().user == non_member

    def test_add_existing_member(self, group, group_creator, member_user):
        with pytest.raises(AlreadyMemberError):
            add_member(group_id=group.id, user_id=member_user.id, added_by=group_creator)

    def test_add_member_by_outsider(self, group, non_member, member_user):
        with pytest.raises(InsufficientPermissionsError):
            add_member(group_id=group.id, user_id=non_member.id, added_by=non_member)

    def test_remove_settled_member(self, group, group_creator, third_user):
        remove_member(group_id=group.id, user_id=third_user.id, removed_by=group_creator)

        assert not group.has_member(third_user)

    def test_remove_member_with_balance_rejected(self, group, group_creator, third_user):
        record_expense(
            group_id=group.id,
            acting_user=group_creator,
            description='Tickets',
            amount=Decimal('300.00'),
            paid_by_id=group_creator.id,
        )

        with pytest.raises(OutstandingBalanceError):
            remove_member(group_id=group.id, user_id=third_user.id, removed_by=group_creator)

        assert group.has_member(third_user)

    def test_remove_member_after_settling(self, group, group_creator, third_user):
        record_expense(
            group_id=group.id,
            acting_user=group_creator,
            description='Tickets',
            amount=Decimal('300.00'),
            paid_by_id=group_creator.id,
        )
        settle_up(
            group_id=group.id,
            acting_user=third_user,
            payer_id=third_user.id,
            receiver_id=group_creator.id,
            amount=Decimal('100.00'),
        )

        remove_member(group_id=group.id, user_id=third_user.id, removed_by=group_creator)

        assert not group.has_member(third_user)
        assert sum(get_balances(group_id=group.id).values()) == Decimal('0.00')

    def test_cannot_remove_creator(self, group, group_creator, member_user):
        with pytest.raises(CannotRemoveCreatorError):
            remove_member(group_id=group.id, user_id=group_creator.id, removed_by=member_user)

    def test_remove_non_member(self, group, group_creator, non_member):
        with pytest.raises(NotMemberError):
            remove_member(group_id=group.id, user_id=non_member.id, removed_by=group_creator)


# =============================================================================
# Balance Ledger Service Tests
# =============================================================================

class TestDeltaArithmetic:
    """Tests for the pure delta helpers."""

    def test_expense_deltas_sum_to_zero(self):
        deltas = expense_deltas(
            Decimal('100.00'),
            'a',
            {'a': Decimal('33.34'), 'b': Decimal('33.33'), 'c': Decimal('33.33')},
        )

        assert deltas == {'a': Decimal('66.66'), 'b': Decimal('-33.33'), 'c': Decimal('-33.33')}
        assert sum(deltas.values()) == Decimal('0.00')

    def test_zero_shares_are_skipped(self):
        deltas = expense_deltas(Decimal('10.00'), 'a', {'b': Decimal('10.00'), 'c': Decimal('0.00')})

        assert deltas == {'a': Decimal('10.00'), 'b': Decimal('-10.00')}

    def test_settlement_shape(self):
        assert expense_deltas(Decimal('25.00'), 'payer', {'receiver': Decimal('25.00')}) == {
            'payer': Decimal('25.00'),
            'receiver': Decimal('-25.00'),
        }

    def test_negate_then_merge_cancels(self):
        deltas = expense_deltas(Decimal('60.00'), 'a', {'a': Decimal('30.00'), 'b': Decimal('30.00')})

        assert merge_deltas(deltas, negate_deltas(deltas)) == {}


@pytest.mark.django_db
class TestBalanceLedger:
    """Tests for balance_ledger.py service functions."""

    def test_apply_delta_increments(self, group, group_creator, member_user):
        apply_delta(group_id=group.id, member_deltas={group_creator.id: Decimal('10.00'), member_user.id: Decimal('-10.00')})
        apply_delta(group_id=group.id, member_deltas={str(group_creator.id): Decimal('5.00'), str(member_user.id): Decimal('-5.00')})

        balances = get_balances(group_id=group.id)
        assert balances[str(group_creator.id)] == Decimal('15.00')
        assert balances[str(member_user.id)] == Decimal('-15.00')

    def test_apply_delta_to_non_member_rolls_back(self, group, group_creator, non_member):
        with pytest.raises(NotMemberError):
            apply_delta(
                group_id=group.id,
                member_deltas={group_creator.id: Decimal('10.00'), non_member.id: Decimal('-10.00')},
            )

        assert get_balances(group_id=group.id)[str(group_creator.id)] == Decimal('0.00')

    def test_balances_in_join_order(self, group, group_creator, member_user, third_user):
        assert list(get_balances(group_id=group.id)) == [
            str(group_creator.id),
            str(member_user.id),
            str(third_user.id),
        ]

    def test_get_balances_unknown_group(self):
        with pytest.raises(GroupNotFoundError):
            get_balances(group_id=uuid4())

    def test_recompute_matches_stored(self, group, group_creator, member_user):
        record_expense(
            group_id=group.id,
            acting_user=group_creator,
            description='Tolls',
            amount=Decimal('100.00'),
            paid_by_id=member_user.id,
        )

        assert recompute_balances(group_id=group.id) == get_balances(group_id=group.id)

    def test_rebuild_corrects_drift(self, group, group_creator, member_user, third_user):
        record_expense(
            group_id=group.id,
            acting_user=group_creator,
            description='Tolls',
            amount=Decimal('90.00'),
            paid_by_id=group_creator.id,
        )
        GroupMembership.objects.filter(group=group, user=member_user).update(balance=Decimal('0.00'))

        corrections = rebuild_balances(group_id=group.id)

        assert corrections == {str(member_user.id): Decimal('-30.00')}
        assert get_balances(group_id=group.id)[str(member_user.id)] == Decimal('-30.00')
        assert sum(get_balances(group_id=group.id).values()) == Decimal('0.00')

    def test_total_balance_across_groups(self, group, group_creator, member_user):
        other = create_group(name='Office Lunch', created_by=member_user, member_ids=[group_creator.id])
        record_expense(
            group_id=group.id,
            acting_user=group_creator,
            description='Fuel',
            amount=Decimal('90.00'),
            paid_by_id=group_creator.id,
        )
        record_expense(
            group_id=other.id,
            acting_user=member_user,
            description='Pizza',
            amount=Decimal('40.00'),
            paid_by_id=member_user.id,
        )

        assert get_user_total_balance(user=group_creator) == Decimal('40.00')
        assert get_user_total_balance(user=member_user) == Decimal('-10.00')
