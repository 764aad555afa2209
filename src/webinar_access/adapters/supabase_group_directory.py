"""Supabase-backed group directory."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from webinar_access.services.directory import GroupDirectory


@dataclass
class SupabaseGroupDirectory(GroupDirectory):
    """Reads group memberships, ignoring deactivated groups."""

    client: Client

    def groups_of(self, user_id: UUID) -> frozenset[UUID]:
        """Return ids of the active groups the user belongs to."""
        memberships = (
            self.client.table("group_members")
            .select("group_id")
            .eq("user_id", str(user_id))
            .execute()
        )
        group_ids = [str(row["group_id"]) for row in memberships.data or []]
        if not group_ids:
            return frozenset()
        active = (
            self.client.table("groups")
            .select("id")
            .in_("id", group_ids)
            .eq("is_active", True)
            .execute()
        )
        return frozenset(UUID(str(row["id"])) for row in active.data or [])
