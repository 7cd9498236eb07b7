"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from kaja_tracker.domain.models import Profile
from kaja_tracker.services.profiles import ProfileRepository

_COLUMNS = "id, email, full_name, avatar_url, is_admin, is_approved, created_at"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile reads and approval updates."""

    client: Client

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile for a user id, if present."""
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def list_profiles_by_ids(self, user_ids: list[UUID]) -> list[Profile]:
        """Return profiles for the given ids in a single query."""
        if not user_ids:
            return []
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .in_("id", [str(user_id) for user_id in user_ids])
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_profiles(self) -> list[Profile]:
        """Return every profile, newest first."""
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_approved_profiles(self) -> list[Profile]:
        """Return profiles with approved access."""
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .eq("is_approved", True)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def set_approved(self, user_id: UUID, approved: bool) -> Profile | None:
        """Update the approval flag for a profile."""
        response = (
            self.client.table("profiles")
            .update({"is_approved": approved})
            .eq("id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])


def _parse_row(row: dict[str, object]) -> Profile:
    created_raw = row.get("created_at")
    return Profile(
        id=UUID(str(row["id"])),
        email=str(row.get("email") or ""),
        full_name=row.get("full_name"),
        avatar_url=row.get("avatar_url"),
        is_admin=bool(row.get("is_admin")),
        is_approved=bool(row.get("is_approved")),
        created_at=datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None,
    )
