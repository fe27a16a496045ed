from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # GET /api/accounts/user/          - Current user profile
    # GET /api/accounts/search/?q=...  - Member search
    path('user/', views.get_current_user, name='current-user'),
    path('search/', views.search, name='search'),
]
