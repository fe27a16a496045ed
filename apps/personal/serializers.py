from rest_framework import serializers
from .models import PersonalExpense


class PersonalExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the personal log.

    Query Parameters:
        shared_only (bool): Only entries mirrored from groups
    """

    shared_only = serializers.BooleanField(required=False, default=False)


class PersonalSummaryFilterSerializer(serializers.Serializer):
    """Validate the optional date range of a personal summary."""

    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })

        return attrs


class PersonalExpenseSerializer(serializers.ModelSerializer):
    """Read-only view of a personal log entry."""

    is_income = serializers.BooleanField(read_only=True)

    class Meta:
        model = PersonalExpense
        fields = [
            'id',
            'amount',
            'category',
            'description',
            'date',
            'is_shared',
            'shared_group_id',
            'shared_expense_id',
            'recoverable_amount',
            'is_income',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PersonalSummarySerializer(serializers.Serializer):
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_income = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_recoverable = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_spent = serializers.DecimalField(max_digits=14, decimal_places=2)
