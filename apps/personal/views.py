from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    PersonalExpenseFilterSerializer,
    PersonalExpenseSerializer,
    PersonalSummaryFilterSerializer,
    PersonalSummarySerializer,
)
from .services import list_personal_expenses, summarize_personal_expenses


class PersonalExpensePagination(PageNumberPagination):
    """Custom pagination for the personal log."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class PersonalExpenseViewSet(viewsets.ReadOnlyModelViewSet):
    """
    The current user's personal expense log (read-only).

    list: Entries, newest first (``?shared_only=true`` for group mirrors)
    retrieve: Get one entry
    summary: Spending, income and recoverable totals
    """

    serializer_class = PersonalExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = PersonalExpensePagination

    def get_queryset(self):
        """Only the current user's entries."""
        filter_serializer = PersonalExpenseFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_personal_expenses(
            user=self.request.user,
            shared_only=filter_serializer.validated_data['shared_only']
        )

    @extend_schema(parameters=[PersonalSummaryFilterSerializer], responses={200: PersonalSummarySerializer})
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """
        Totals of the personal log.

        GET /api/personal/expenses/summary/?date_from=2024-03-01&date_to=2024-03-31
        """
        params_serializer = PersonalSummaryFilterSerializer(data=request.query_params)
        params_serializer.is_valid(raise_exception=True)

        totals = summarize_personal_expenses(user=request.user, **params_serializer.validated_data)
        return Response(PersonalSummarySerializer(totals).data)
