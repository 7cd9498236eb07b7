"""Domain models for users and profiles."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class AuthUser:
    """User identity resolved from an access token."""

    id: UUID
    email: str | None


@dataclass(frozen=True)
class Profile:
    """Represents a profile row stored in the database."""

    id: UUID
    email: str
    full_name: str | None
    avatar_url: str | None
    is_admin: bool
    is_approved: bool
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Full name, falling back to the local part of the email."""
        if self.full_name:
            return self.full_name
        return self.email.split("@")[0]
