from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'personal'

router = DefaultRouter()
router.register(r'expenses', views.PersonalExpenseViewSet, basename='personal-expense')

urlpatterns = [
    # GET /api/personal/expenses/          - List personal log
    # GET /api/personal/expenses/{id}/     - Get entry
    # GET /api/personal/expenses/summary/  - Totals
    path('', include(router.urls)),
]
