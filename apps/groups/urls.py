from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = SimpleRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/              - List user's groups
    # POST   /api/groups/              - Create group
    # GET    /api/groups/{id}/         - Get group with members and balances
    # PATCH  /api/groups/{id}/         - Rename group
    # DELETE /api/groups/{id}/         - Delete group (creator)

    # Custom group actions
    # GET    /api/groups/{id}/members/            - List members
    # GET    /api/groups/{id}/balances/           - Member balances
    # GET    /api/groups/{id}/settlement-plan/    - Suggested payments
    # POST   /api/groups/{id}/add_member/         - Add member
    # DELETE /api/groups/{id}/remove_member/      - Remove settled member
    # POST   /api/groups/{id}/rebuild_balances/   - Reconcile balances (creator)
    # GET    /api/groups/my_total/                - Total balance across groups

    # Include router URLs
    path('', include(router.urls)),
]
