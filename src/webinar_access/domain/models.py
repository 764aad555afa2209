"""Domain models for directory lookups."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserProfile:
    """Represents a user as seen by the access layer."""

    id: UUID
    display_name: str
    email: str | None = None
    avatar_url: str | None = None
