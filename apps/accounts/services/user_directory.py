"""User directory: identity to display name resolution and member search."""

from typing import Dict, Iterable, List
from uuid import UUID
import re

from django.db.models import Q
from fuzzywuzzy import fuzz

from ..models import User
from .exceptions import UserNotFoundError


MIN_QUERY_LENGTH = 3
FUZZY_MATCH_THRESHOLD = 80


def normalize_text(text: str) -> str:
    """Lowercase, collapse whitespace and strip punctuation."""
    text = text.lower().strip()
    text = re.sub(r'\s+', ' ', text)
    text = re.sub(r'[^\w\s@.-]', '', text)
    return text


def get_user_by_id(*, user_id: UUID) -> User:
    try:
        return User.objects.get(id=user_id, is_active=True)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")


def resolve_display_names(member_ids: Iterable) -> Dict[str, str]:
    """
    Resolve identities to display names in one query.

    Unknown identities map to 'Unknown' so a ledger that still references a
    deleted account can be rendered.

    Args:
        member_ids: Iterable of user UUIDs (or their string form)

    Returns:
        Dict keyed by stringified UUID
    """
    keys = [str(member_id) for member_id in member_ids]
    users = User.objects.filter(id__in=keys)
    names = {str(user.id): user.get_display_name() for user in users}
    return {key: names.get(key, 'Unknown') for key in keys}


def _score(query: str, user: User) -> int:
    return max(
        fuzz.partial_ratio(query, normalize_text(user.display_name or '')),
        fuzz.partial_ratio(query, normalize_text(user.email)),
    )


def search_users(
    *,
    query: str,
    exclude_ids: Iterable = (),
    limit: int = 10
) -> List[User]:
    """
    Find candidate users for group membership.

    Substring matches on display name or email come first, then fuzzy
    matches from the remaining active users; everything is ranked by
    fuzzy similarity.

    Args:
        query: Free text typed by the user
        exclude_ids: Identities to leave out (e.g. existing members)
        limit: Maximum number of results

    Returns:
        List of User ordered by relevance
    """
    query_norm = normalize_text(query or '')
    if len(query_norm) < MIN_QUERY_LENGTH:
        return []

    excluded = [str(user_id) for user_id in exclude_ids]
    base = User.objects.filter(is_active=True).exclude(id__in=excluded)

    direct = list(
        base.filter(
            Q(display_name__icontains=query_norm) |
            Q(email__icontains=query_norm)
        )[:100]
    )
    candidates = [(user, _score(query_norm, user)) for user in direct]

    if len(candidates) < limit:
        seen = {user.id for user in direct}
        for user in base.exclude(id__in=seen).order_by('-created_at')[:100]:
            score = _score(query_norm, user)
            if score >= FUZZY_MATCH_THRESHOLD:
                candidates.append((user, score))

    candidates.sort(key=lambda item: item[1], reverse=True)
    return [user for user, _ in candidates[:limit]]
