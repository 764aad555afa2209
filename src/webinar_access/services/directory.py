"""Read-only lookups against the user and group directories."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from webinar_access.domain.errors import NotFoundError
from webinar_access.domain.models import UserProfile
from webinar_access.services.cache import Cache
from webinar_access.services.locks import bounded_call

_logger = logging.getLogger(__name__)


class GroupDirectory(Protocol):
    """Resolves a user to the groups they belong to."""

    def groups_of(self, user_id: UUID) -> frozenset[UUID]:
        """Return ids of the active groups the user is a member of."""


class UserDirectory(Protocol):
    """Resolves a user id to a profile."""

    def get_user(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if the user exists."""


@dataclass
class DirectoryService:
    """Directory lookups with a deadline and a membership cache."""

    group_directory: GroupDirectory
    user_directory: UserDirectory
    cache: Cache
    group_ttl_seconds: int = 30
    timeout_seconds: float = 5.0

    async def groups_of(self, user_id: UUID) -> frozenset[UUID]:
        """Return the user's group ids."""
        cache_key = f"groups:{user_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, frozenset):
            return cached
        groups = await bounded_call(
            self.group_directory.groups_of,
            user_id,
            timeout=self.timeout_seconds,
            action=f"groups_of:{user_id}",
        )
        groups = frozenset(groups)
        self.cache.set(cache_key, groups, ttl_seconds=self.group_ttl_seconds)
        _logger.debug("Resolved %s group(s) for user %s", len(groups), user_id)
        return groups

    async def get_user(self, user_id: UUID) -> UserProfile:
        """Return the user's profile or raise ``NotFoundError``."""
        profile = await bounded_call(
            self.user_directory.get_user,
            user_id,
            timeout=self.timeout_seconds,
            action=f"get_user:{user_id}",
        )
        if profile is None:
            raise NotFoundError(f"User {user_id} not found")
        return profile

    def forget_groups(self, user_id: UUID) -> None:
        """Drop cached memberships so the next lookup hits the directory."""
        self.cache.delete(f"groups:{user_id}")
