from rest_framework import serializers
from .models import Group, GroupMembership
from apps.accounts.serializers import UserMinimalSerializer


class GroupMemberSerializer(serializers.ModelSerializer):
    """A member with their running balance."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupMembership
        fields = ['id', 'user', 'balance', 'joined_at']
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    created_by = UserMinimalSerializer(read_only=True)
    members = GroupMemberSerializer(source='memberships', many=True, read_only=True)
    my_balance = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'created_by',
            'members',
            'my_balance',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_my_balance(self, obj):
        """Current user's balance in the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            balance = obj.balances.get(str(request.user.id))
            return str(balance) if balance is not None else None
        return None


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    created_by = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()
    my_balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'created_by',
            'member_count',
            'my_balance',
            'created_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.memberships.count()


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=200)
    member_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        default=list,
        help_text="Users to add besides the creator."
    )

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Group name cannot be blank')
        return value


class GroupUpdateSerializer(serializers.Serializer):
    """Serializer for renaming groups."""

    name = serializers.CharField(max_length=200)


class MemberInputSerializer(serializers.Serializer):
    """Serializer for adding or removing a member."""

    user_id = serializers.UUIDField()


class BalanceSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    display_name = serializers.CharField()
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class TotalBalanceSerializer(serializers.Serializer):
    total_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
