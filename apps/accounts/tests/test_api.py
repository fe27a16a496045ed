import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User
from apps.accounts.services import (
    get_user_by_id,
    resolve_display_names,
    search_users,
    UserNotFoundError,
)
from apps.groups.services import create_group


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /api/accounts/user/"""

    def test_get_current_user(self, authenticated_client, user):
        """Returns the authenticated user's profile."""
        url = reverse('accounts:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['display_name'] == 'Test User'

    def test_get_current_user_unauthenticated(self, api_client):
        """Unauthenticated request is rejected."""
        url = reverse('accounts:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Search Tests
# =============================================================================

@pytest.mark.django_db
class TestUserSearch:
    """Tests for GET /api/accounts/search/"""

    def test_search_by_display_name(self, authenticated_client, searchable_users):
        """Substring match on display name finds active users."""
        url = reverse('accounts:search')
        response = authenticated_client.get(url, {'q': 'priya'})

        assert response.status_code == status.HTTP_200_OK
        names = [u['display_name'] for u in response.data]
        assert 'Priya Sharma' in names
        assert 'Priya Gone' not in names

    def test_search_short_query_returns_nothing(self, authenticated_client, searchable_users):
        """Queries under three characters do not hit the directory."""
        url = reverse('accounts:search')
        response = authenticated_client.get(url, {'q': 'pr'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []

    def test_search_excludes_self(self, authenticated_client, user):
        """The caller never appears in their own search results."""
        url = reverse('accounts:search')
        response = authenticated_client.get(url, {'q': 'testuser'})

        assert response.status_code == status.HTTP_200_OK
        assert str(user.id) not in [u['id'] for u in response.data]

    def test_search_excludes_group_members(self, authenticated_client, user, searchable_users):
        """exclude_group leaves out people already in the group."""
        priya = searchable_users[0]
        group = create_group(name='Trip', created_by=user, member_ids=[priya.id])

        url = reverse('accounts:search')
        response = authenticated_client.get(url, {'q': 'priya', 'exclude_group': str(group.id)})

        assert response.status_code == status.HTTP_200_OK
        assert str(priya.id) not in [u['id'] for u in response.data]

    def test_search_exclude_group_requires_membership(self, authenticated_client, other_user, searchable_users):
        """A group the caller does not belong to cannot be used as a filter."""
        priya = searchable_users[0]
        group = create_group(name='Private', created_by=other_user, member_ids=[priya.id])

        url = reverse('accounts:search')
        response = authenticated_client.get(url, {'q': 'priya', 'exclude_group': str(group.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'error' in response.data

    def test_search_exclude_unknown_group(self, authenticated_client):
        """An unknown group is refused the same way as a foreign one."""
        url = reverse('accounts:search')
        response = authenticated_client.get(url, {'q': 'priya', 'exclude_group': str(uuid4())})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_search_requires_query(self, authenticated_client):
        """Missing q parameter is a validation error."""
        url = reverse('accounts:search')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Directory Service Tests
# =============================================================================

@pytest.mark.django_db
class TestUserDirectory:
    """Tests for user_directory service functions."""

    def test_resolve_display_names(self, user, other_user):
        """Names are keyed by stringified identity."""
        names = resolve_display_names([user.id, other_user.id])

        assert names == {
            str(user.id): 'Test User',
            str(other_user.id): 'Other User',
        }

    def test_resolve_unknown_identity(self, db):
        """Unknown identities render as 'Unknown'."""
        missing = uuid4()
        assert resolve_display_names([missing]) == {str(missing): 'Unknown'}

    def test_search_ranks_closer_match_first(self, searchable_users):
        """Ranking puts the closest match at the top."""
        results = search_users(query='Pritam')

        assert results[0].display_name == 'Pritam Das'

    def test_search_respects_limit(self, searchable_users):
        results = search_users(query='example', limit=2)
        assert len(results) == 2

    def test_get_user_by_id_not_found(self, db):
        with pytest.raises(UserNotFoundError):
            get_user_by_id(user_id=uuid4())


# =============================================================================
# User Model Tests
# =============================================================================

@pytest.mark.django_db
class TestUserModel:
    """Tests for User model."""

    def test_create_user(self, db):
        """Create regular user."""
        user = User.objects.create_user(
            email='new@example.com',
            password='TestPass123!',
        )

        assert user.email == 'new@example.com'
        assert user.check_password('TestPass123!')
        assert not user.is_staff

    def test_create_user_requires_email(self, db):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='x')

    def test_get_display_name(self, user):
        """Display name is used when set."""
        assert user.get_display_name() == 'Test User'

    def test_get_display_name_falls_back_to_email(self, db):
        """Email prefix is used when display name is empty."""
        user = User.objects.create_user(email='nobody@example.com', password='x')
        assert user.get_display_name() == 'nobody'

    def test_user_str(self, user):
        assert str(user) == user.email


# =============================================================================
# Project Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /api/health/"""

    def test_health_over_plain_http(self, api_client):
        """Plain http requests are served directly, not redirected to https."""
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'status': 'ok', 'database': 'ok'}

    def test_ssl_redirect_disabled_under_tests(self):
        from django.conf import settings

        assert settings.SECURE_SSL_REDIRECT is False
