from rest_framework import serializers
from .models import ExpenseKind, SharedExpense, ExpenseShare, SplitType
from apps.accounts.serializers import UserMinimalSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the group entry list.

    Query Parameters:
        kind (str): 'expense' or 'settlement'
    """

    kind = serializers.ChoiceField(choices=ExpenseKind.choices, required=False)


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate input for recording a shared expense.

    Fields:
        description (str): What the money was spent on
        amount (Decimal): Total paid
        paid_by (UUID): Member who paid (defaults to the current user)
        date (date): Date of the expense (defaults to today)
        split_type (str): 'equal' or 'exact'
        participants (list[UUID]): Members sharing an equal split
        shares (dict[UUID, Decimal]): Member shares for an exact split
    """

    description = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    paid_by = serializers.UUIDField(required=False)
    date = serializers.DateField(required=False)
    split_type = serializers.ChoiceField(choices=SplitType.choices, default=SplitType.EQUAL)
    participants = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        help_text="Members to split between. If not provided, splits among all group members."
    )
    shares = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2),
        required=False,
        help_text="Share per member ID, required for exact splits."
    )

    def validate(self, attrs):
        if attrs.get('split_type') == SplitType.EXACT and not attrs.get('shares'):
            raise serializers.ValidationError({
                'shares': 'Shares are required for an exact split'
            })
        return attrs


class ExpenseUpdateSerializer(serializers.Serializer):
    """Validate a partial edit of a shared expense."""

    description = serializers.CharField(max_length=255, required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    paid_by = serializers.UUIDField(required=False)
    date = serializers.DateField(required=False)
    split_type = serializers.ChoiceField(choices=SplitType.choices, required=False)
    participants = serializers.ListField(child=serializers.UUIDField(), required=False)
    shares = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2),
        required=False
    )


class SettleUpSerializer(serializers.Serializer):
    """
    Validate input for recording a settlement.

    Fields:
        payer (UUID): Member paying (defaults to the current user)
        receiver (UUID): Member receiving the money
        amount (Decimal): Amount paid
        date (date): Date of the payment (defaults to today)
    """

    payer = serializers.UUIDField(required=False)
    receiver = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    date = serializers.DateField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================


class ExpenseShareSerializer(serializers.ModelSerializer):
    """A member's part of an entry."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ExpenseShare
        fields = ['user', 'amount']
        read_only_fields = fields


class SharedExpenseSerializer(serializers.ModelSerializer):
    """Main serializer for ledger entries."""

    paid_by = UserMinimalSerializer(read_only=True)
    created_by = UserMinimalSerializer(read_only=True)
    shares = ExpenseShareSerializer(many=True, read_only=True)
    my_impact = serializers.SerializerMethodField()

    class Meta:
        model = SharedExpense
        fields = [
            'id',
            'group',
            'kind',
            'description',
            'amount',
            'paid_by',
            'date',
            'split_type',
            'shares',
            'member_ids',
            'my_impact',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_my_impact(self, obj):
        from .services import expense_impact_for

        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return None
        return str(expense_impact_for(obj, request.user.id))


class TransferSerializer(serializers.Serializer):
    """One payment of a settlement plan."""

    from_member = serializers.UUIDField()
    to_member = serializers.UUIDField()
    from_name = serializers.CharField()
    to_name = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
