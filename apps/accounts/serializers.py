from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'created_at',
        ]
        read_only_fields = ['id', 'email', 'created_at']


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class UserSearchSerializer(serializers.Serializer):
    """
    Validate query parameters for member search.

    Query Parameters:
        q (str): Search text (at least 3 characters to match anything)
        exclude_group (UUID): Leave out current members of this group
    """

    q = serializers.CharField(max_length=100, required=True)
    exclude_group = serializers.UUIDField(required=False)
