import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def other_user(db):
    """Create and return another test user."""
    return User.objects.create_user(
        email='otheruser@example.com',
        password='OtherPass123!',
        display_name='Other User',
    )


@pytest.fixture
def searchable_users(db):
    """Create a handful of users with distinct names for search tests."""
    return [
        User.objects.create_user(email='priya@example.com', password='x', display_name='Priya Sharma'),
        User.objects.create_user(email='rahul@example.com', password='x', display_name='Rahul Verma'),
        User.objects.create_user(email='pritam@example.com', password='x', display_name='Pritam Das'),
        User.objects.create_user(email='gone@example.com', password='x', display_name='Priya Gone', is_active=False),
    ]


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
