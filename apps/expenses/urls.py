from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'expenses'

# Mounted under /api/groups/<uuid:group_id>/expenses/
router = SimpleRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/groups/{group_id}/expenses/          - List entries
    # POST   /api/groups/{group_id}/expenses/          - Record expense
    # GET    /api/groups/{group_id}/expenses/{id}/     - Get entry
    # PATCH  /api/groups/{group_id}/expenses/{id}/     - Edit expense
    # DELETE /api/groups/{group_id}/expenses/{id}/     - Delete entry
    # POST   /api/groups/{group_id}/expenses/settle/   - Record settlement
    path('', include(router.urls)),
]
