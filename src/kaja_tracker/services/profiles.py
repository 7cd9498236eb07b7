"""Profile persistence interface."""

from typing import Protocol
from uuid import UUID

from kaja_tracker.domain.models import Profile


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile for a user id, if present."""

    def list_profiles_by_ids(self, user_ids: list[UUID]) -> list[Profile]:
        """Return the profiles for a set of user ids."""

    def list_profiles(self) -> list[Profile]:
        """Return every profile, newest first."""

    def list_approved_profiles(self) -> list[Profile]:
        """Return profiles with approved access."""

    def set_approved(self, user_id: UUID, approved: bool) -> Profile | None:
        """Update the approval flag and return the updated profile."""
