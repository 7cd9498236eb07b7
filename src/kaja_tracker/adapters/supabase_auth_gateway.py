"""Supabase auth gateway."""

from dataclasses import dataclass
from uuid import UUID

from supabase import AuthApiError, Client

from kaja_tracker.domain.models import AuthUser
from kaja_tracker.services.access import AuthGateway


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Resolves and revokes Supabase access tokens."""

    client: Client

    def get_user(self, access_token: str) -> AuthUser | None:
        """Return the user for a valid token, or None when it is rejected."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError:
            return None
        if response is None or response.user is None:
            return None
        return AuthUser(id=UUID(response.user.id), email=response.user.email)

    def sign_out(self, access_token: str) -> None:
        """Revoke every session of the token's user."""
        self.client.auth.admin.sign_out(access_token)
