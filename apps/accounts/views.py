from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.models import Group

from .serializers import UserSerializer, UserMinimalSerializer, UserSearchSerializer
from .services import search_users


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current user's profile.",
    tags=['accounts'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Return the authenticated user."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    parameters=[
        OpenApiParameter('q', OpenApiTypes.STR, description='Search text'),
        OpenApiParameter('exclude_group', OpenApiTypes.UUID, required=False),
    ],
    responses={200: UserMinimalSerializer(many=True), 403: OpenApiTypes.OBJECT},
    description="Search users to add to a group.",
    tags=['accounts'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def search(request):
    """Search candidate members by name or email."""
    params_serializer = UserSearchSerializer(data=request.query_params)
    params_serializer.is_valid(raise_exception=True)
    params = params_serializer.validated_data

    exclude_ids = [request.user.id]
    if 'exclude_group' in params:
        group = Group.objects.filter(id=params['exclude_group']).first()
        # Unknown groups and foreign groups look the same to the caller
        if group is None or not group.has_member(request.user):
            return Response(
                {'error': 'You are not a member of this group'},
                status=status.HTTP_403_FORBIDDEN
            )
        exclude_ids += group.member_ids()

    users = search_users(query=params['q'], exclude_ids=exclude_ids)
    return Response(UserMinimalSerializer(users, many=True).data)
