from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    ExpenseCreateSerializer,
    ExpenseFilterSerializer,
    ExpenseUpdateSerializer,
    SettleUpSerializer,
    SharedExpenseSerializer,
)
from .permissions import IsGroupMemberForExpense
from .services import (
    record_expense,
    update_expense,
    delete_expense,
    settle_up,
    get_expense,
    list_group_expenses,
    # Exceptions
    ExpensesServiceError,
    ExpenseNotFoundError,
    InsufficientPermissionsError,
)
from apps.groups.services import GroupNotFoundError, GroupsServiceError


class ExpensePagination(PageNumberPagination):
    """Custom pagination for group entries."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(error):
    """Map a domain error to an HTTP response."""
    if isinstance(error, (ExpenseNotFoundError, GroupNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InsufficientPermissionsError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


class ExpenseViewSet(viewsets.GenericViewSet):
    """
    Ledger entries of one group.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Entries, newest first (``?kind=expense|settlement``)
    create: Record a shared expense
    retrieve: Get one entry
    partial_update: Edit an expense (settlements are not editable)
    destroy: Delete an entry, reversing its effect on balances
    settle: Record a settlement between two members
    """

    serializer_class = SharedExpenseSerializer
    permission_classes = [IsAuthenticated, IsGroupMemberForExpense]
    pagination_class = ExpensePagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        filter_serializer = ExpenseFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_group_expenses(
            group_id=self.kwargs['group_id'],
            kind=filter_serializer.validated_data.get('kind')
        )

    def list(self, request, group_id=None):
        """List group entries."""
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(self.get_serializer(queryset, many=True).data)

    @extend_schema(request=ExpenseCreateSerializer, responses={201: SharedExpenseSerializer})
    def create(self, request, group_id=None):
        """Record a shared expense."""
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = record_expense(
                group_id=group_id,
                acting_user=request.user,
                description=data['description'],
                amount=data['amount'],
                paid_by_id=data.get('paid_by', request.user.id),
                date=data.get('date'),
                split_type=data['split_type'],
                participants=data.get('participants'),
                exact_shares=data.get('shares'),
            )
        except (ExpensesServiceError, GroupsServiceError) as e:
            return _error_response(e)

        output_serializer = self.get_serializer(get_expense(group_id=group_id, expense_id=expense.id))
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, group_id=None, pk=None):
        """Get one entry."""
        try:
            expense = get_expense(group_id=group_id, expense_id=pk)
        except ExpenseNotFoundError as e:
            return _error_response(e)
        return Response(self.get_serializer(expense).data)

    @extend_schema(request=ExpenseUpdateSerializer, responses={200: SharedExpenseSerializer})
    def partial_update(self, request, group_id=None, pk=None):
        """Edit an expense."""
        serializer = ExpenseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            update_expense(
                group_id=group_id,
                expense_id=pk,
                acting_user=request.user,
                description=data.get('description'),
                amount=data.get('amount'),
                paid_by_id=data.get('paid_by'),
                date=data.get('date'),
                split_type=data.get('split_type'),
                participants=data.get('participants'),
                exact_shares=data.get('shares'),
            )
        except (ExpensesServiceError, GroupsServiceError) as e:
            return _error_response(e)

        return Response(self.get_serializer(get_expense(group_id=group_id, expense_id=pk)).data)

    def destroy(self, request, group_id=None, pk=None):
        """Delete an entry."""
        try:
            delete_expense(group_id=group_id, expense_id=pk, acting_user=request.user)
        except (ExpensesServiceError, GroupsServiceError) as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=SettleUpSerializer, responses={201: SharedExpenseSerializer})
    @action(detail=False, methods=['post'])
    def settle(self, request, group_id=None):
        """
        Record a settlement.

        POST /api/groups/{group_id}/expenses/settle/
        Body: {"receiver": "<uuid>", "amount": "250.00"}
        """
        serializer = SettleUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = settle_up(
                group_id=group_id,
                acting_user=request.user,
                payer_id=data.get('payer', request.user.id),
                receiver_id=data['receiver'],
                amount=data['amount'],
                date=data.get('date'),
            )
        except (ExpensesServiceError, GroupsServiceError) as e:
            return _error_response(e)

        output_serializer = self.get_serializer(get_expense(group_id=group_id, expense_id=expense.id))
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)
