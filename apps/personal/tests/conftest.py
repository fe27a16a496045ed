import pytest
from decimal import Decimal
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.services import create_group
from apps.personal.models import PersonalExpense


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='meera@example.com',
        password='TestPass123!',
        display_name='Meera',
    )


@pytest.fixture
def friend(db):
    """Create and return a second user."""
    return User.objects.create_user(
        email='kabir@example.com',
        password='TestPass123!',
        display_name='Kabir',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def flat_group(db, user, friend):
    """Two-person group created by the user."""
    return create_group(name='Flat', created_by=user, member_ids=[friend.id])


@pytest.fixture
def personal_entries(db, user, friend):
    """A private expense and a salary entry for the user, one for the friend."""
    return [
        PersonalExpense.objects.create(
            user=user, amount=Decimal('250.00'), category='Food',
            description='Lunch', date=date(2024, 3, 2),
        ),
        PersonalExpense.objects.create(
            user=user, amount=Decimal('-1000.00'), category='Income',
            description='Refund', date=date(2024, 3, 3),
        ),
        PersonalExpense.objects.create(
            user=friend, amount=Decimal('75.00'), category='Travel',
            description='Metro', date=date(2024, 3, 2),
        ),
    ]
