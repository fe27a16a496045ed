import pytest
from decimal import Decimal
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.services import create_group
from apps.expenses.models import SplitType
from apps.expenses.services import record_expense


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def payer(db):
    """Create and return the member who usually pays."""
    return User.objects.create_user(
        email='asha@example.com',
        password='TestPass123!',
        display_name='Asha',
    )


@pytest.fixture
def member1(db):
    """Create and return a group member."""
    return User.objects.create_user(
        email='bharat@example.com',
        password='TestPass123!',
        display_name='Bharat',
    )


@pytest.fixture
def member2(db):
    """Create and return another group member."""
    return User.objects.create_user(
        email='chitra@example.com',
        password='TestPass123!',
        display_name='Chitra',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user not in the group."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


def _authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def payer_client(api_client, payer):
    """Return API client authenticated as the payer."""
    return _authenticate(api_client, payer)


@pytest.fixture
def member1_client(member1):
    """Return a separate API client authenticated as member1."""
    return _authenticate(APIClient(), member1)


@pytest.fixture
def outsider_client(api_client, outsider):
    """Return API client authenticated as the outsider."""
    return _authenticate(api_client, outsider)


@pytest.fixture
def trip_group(db, payer, member1, member2):
    """Group of three, created by the payer, all balances zero."""
    return create_group(
        name='Goa Trip',
        created_by=payer,
        member_ids=[member1.id, member2.id],
    )


@pytest.fixture
def dinner(trip_group, payer):
    """Payer paid 900.00 split equally among all three members."""
    return record_expense(
        group_id=trip_group.id,
        acting_user=payer,
        description='Dinner',
        amount=Decimal('900.00'),
        paid_by_id=payer.id,
        date=date(2024, 3, 1),
        split_type=SplitType.EQUAL,
    )
