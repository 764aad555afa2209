"""Supabase-backed user directory."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from webinar_access.domain.models import UserProfile
from webinar_access.services.directory import UserDirectory


@dataclass
class SupabaseUserDirectory(UserDirectory):
    """Supabase implementation for user profile lookups."""

    client: Client

    def get_user(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if present."""
        response = (
            self.client.table("users")
            .select("id, full_name, email, avatar_url")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return UserProfile(
            id=UUID(row["id"]),
            display_name=row.get("full_name") or "Anonymous",
            email=row.get("email"),
            avatar_url=row.get("avatar_url"),
        )
