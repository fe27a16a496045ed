from django.conf import settings
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    MemberInputSerializer,
    BalanceSerializer,
    TotalBalanceSerializer,
)
from .permissions import IsGroupMember, IsGroupCreator

from apps.accounts.services import resolve_display_names
from apps.expenses.serializers import TransferSerializer
from apps.expenses.services import settlement_plan_for_group
from apps.groups.services import (
    create_group,
    rename_group,
    delete_group,
    get_group_by_id,
    list_user_groups,
    add_member,
    remove_member,
    get_group_members,
    get_balances,
    rebuild_balances,
    get_user_total_balance,
    # Exceptions
    GroupsServiceError,
    GroupNotFoundError,
    InsufficientPermissionsError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(error):
    """Map a domain error to an HTTP response."""
    if isinstance(error, GroupNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InsufficientPermissionsError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Group CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups (user is member of) with the user's balance
    create: Create a new group
    retrieve: Get a group with its members and balances
    partial_update: Rename a group (any member)
    destroy: Delete a group (creator only)
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated, IsGroupMember]
    pagination_class = GroupPagination
    lookup_value_regex = '[0-9a-f-]{36}'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        """Return only groups where user is a member."""
        return list_user_groups(user=self.request.user).prefetch_related('memberships__user')

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action == 'create':
            return GroupCreateSerializer
        elif self.action == 'partial_update':
            return GroupUpdateSerializer
        return GroupSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['destroy', 'rebuild_balances']:
            return [IsAuthenticated(), IsGroupCreator()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = create_group(
                name=serializer.validated_data['name'],
                created_by=request.user,
                member_ids=serializer.validated_data['member_ids'],
            )
        except GroupsServiceError as e:
            return _error_response(e)

        output_serializer = GroupSerializer(get_group_by_id(group_id=group.id), context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        """Rename a group."""
        group = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            rename_group(group_id=group.id, user=request.user, name=serializer.validated_data['name'])
        except GroupsServiceError as e:
            return _error_response(e)

        output_serializer = GroupSerializer(get_group_by_id(group_id=group.id), context={'request': request})
        return Response(output_serializer.data)

    def destroy(self, request, *args, **kwargs):
        """Delete a group."""
        group = self.get_object()
        try:
            delete_group(group_id=group.id, user=request.user)
        except GroupsServiceError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members of the group."""
        group = self.get_object()
        memberships = get_group_members(group_id=group.id)
        serializer = GroupMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @extend_schema(responses={200: BalanceSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def balances(self, request, pk=None):
        """
        Member balances in join order.

        GET /api/groups/{id}/balances/
        """
        group = self.get_object()
        balances = get_balances(group_id=group.id)
        names = resolve_display_names(balances.keys())
        data = [
            {'user_id': member_id, 'display_name': names[member_id], 'balance': balance}
            for member_id, balance in balances.items()
        ]
        return Response(BalanceSerializer(data, many=True).data)

    @extend_schema(responses={200: TransferSerializer(many=True)})
    @action(detail=True, methods=['get'], url_path='settlement-plan')
    def settlement_plan(self, request, pk=None):
        """
        Payments that would settle the group, computed from current balances.

        GET /api/groups/{id}/settlement-plan/
        """
        group = self.get_object()
        plan = settlement_plan_for_group(group_id=group.id)
        names = resolve_display_names(
            [t.from_member for t in plan] + [t.to_member for t in plan]
        )
        data = [
            {
                'from_member': t.from_member,
                'to_member': t.to_member,
                'from_name': names[t.from_member],
                'to_name': names[t.to_member],
                'amount': t.amount,
            }
            for t in plan
        ]
        return Response(TransferSerializer(data, many=True).data)

    @extend_schema(request=MemberInputSerializer, responses={201: GroupMemberSerializer})
    @action(detail=True, methods=['post'])
    def add_member(self, request, pk=None):
        """Add a member with a zero balance."""
        group = self.get_object()
        serializer = MemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = add_member(
                group_id=group.id,
                user_id=serializer.validated_data['user_id'],
                added_by=request.user
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response(GroupMemberSerializer(membership).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=MemberInputSerializer, responses={204: None})
    @action(detail=True, methods=['delete'])
    def remove_member(self, request, pk=None):
        """Remove a member whose balance is settled."""
        group = self.get_object()
        serializer = MemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_member(
                group_id=group.id,
                user_id=serializer.validated_data['user_id'],
                removed_by=request.user
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def rebuild_balances(self, request, pk=None):
        """
        Reconcile stored balances with the entry history (creator only).

        POST /api/groups/{id}/rebuild_balances/
        """
        group = self.get_object()
        corrections = rebuild_balances(group_id=group.id)
        return Response({
            'corrections': {member_id: str(delta) for member_id, delta in corrections.items()},
            'balances': {member_id: str(balance) for member_id, balance in get_balances(group_id=group.id).items()},
        })

    @extend_schema(responses={200: TotalBalanceSerializer})
    @action(detail=False, methods=['get'])
    def my_total(self, request):
        """
        Sum of the current user's balances across all groups.

        GET /api/groups/my_total/
        """
        data = {
            'total_balance': get_user_total_balance(user=request.user),
            'currency': getattr(settings, 'LEDGER_CURRENCY', 'INR'),
        }
        return Response(TotalBalanceSerializer(data).data)
