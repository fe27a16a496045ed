import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.services import create_group


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def group_creator(db):
    """Create and return the user who creates the group."""
    return User.objects.create_user(
        email='creator@example.com',
        password='TestPass123!',
        display_name='Group Creator',
    )


@pytest.fixture
def member_user(db):
    """Create and return a member user."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Group Member',
    )


@pytest.fixture
def third_user(db):
    """Create and return a third member."""
    return User.objects.create_user(
        email='third@example.com',
        password='TestPass123!',
        display_name='Third Member',
    )


@pytest.fixture
def non_member(db):
    """Create and return a user who is not in the group."""
    return User.objects.create_user(
        email='nonmember@example.com',
        password='TestPass123!',
        display_name='Non Member',
    )


@pytest.fixture
def group(db, group_creator, member_user, third_user):
    """Group of three with zero balances."""
    return create_group(
        name='Weekend Trip',
        created_by=group_creator,
        member_ids=[member_user.id, third_user.id],
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def creator_client(group_creator):
    """Return API client authenticated as the group creator."""
    return _client_for(group_creator)


@pytest.fixture
def member_client(member_user):
    """Return API client authenticated as a regular member."""
    return _client_for(member_user)


@pytest.fixture
def non_member_client(non_member):
    """Return API client authenticated as a non-member."""
    return _client_for(non_member)
