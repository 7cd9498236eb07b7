"""Session and approval checks with a short-lived cache."""

import asyncio
import hashlib
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from kaja_tracker.domain.models import AuthUser, Profile
from kaja_tracker.services.cache import Cache
from kaja_tracker.services.profiles import ProfileRepository

_logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    """Interface to the hosted identity provider."""

    def get_user(self, access_token: str) -> AuthUser | None:
        """Return the user owning a valid access token."""

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""


class AuthenticationError(Exception):
    """Raised when a request carries no valid session."""


class AuthTimeoutError(AuthenticationError):
    """Raised when the session check did not finish in time."""


@dataclass(frozen=True)
class SessionState:
    """Authenticated user with approval status at check time."""

    user: AuthUser
    profile: Profile | None
    approved: bool
    is_admin: bool
    checked_at: datetime


@dataclass
class AccessService:
    """Resolves access tokens to session state, caching results per token.

    Cached entries live for ``ttl_seconds`` and are dropped on sign-out or
    when the user's profile changes.
    """

    auth_gateway: AuthGateway
    profile_repository: ProfileRepository
    cache: Cache
    ttl_seconds: int = 300
    timeout_seconds: float = 10.0
    _keys_by_user: dict[UUID, set[str]] = field(
        default_factory=dict, init=False, repr=False
    )

    async def check(self, access_token: str) -> SessionState:
        """Return the session state for a token or raise AuthenticationError."""
        key = _cache_key(access_token)
        cached = self.cache.get(key)
        if isinstance(cached, SessionState):
            return cached

        try:
            state = await asyncio.wait_for(
                asyncio.to_thread(self._resolve, access_token),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            _logger.warning("Session check timed out")
            raise AuthTimeoutError("Session check timed out") from exc
        except Exception as exc:
            _logger.exception("Session check failed")
            raise AuthenticationError("Session check failed") from exc
        if state is None:
            raise AuthenticationError("Invalid session")

        self.cache.set(key, state, ttl_seconds=self.ttl_seconds)
        self._keys_by_user.setdefault(state.user.id, set()).add(key)
        return state

    async def sign_out(self, access_token: str) -> None:
        """Forget the cached session and revoke it at the provider."""
        key = _cache_key(access_token)
        cached = self.cache.get(key)
        self.cache.delete(key)
        if isinstance(cached, SessionState):
            self._keys_by_user.get(cached.user.id, set()).discard(key)
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.auth_gateway.sign_out, access_token),
                timeout=self.timeout_seconds,
            )
        except Exception:
            _logger.exception("Sign out at the identity provider failed")

    def invalidate_user(self, user_id: UUID) -> None:
        """Drop every cached session of a user."""
        for key in self._keys_by_user.pop(user_id, set()):
            self.cache.delete(key)

    def _resolve(self, access_token: str) -> SessionState | None:
        user = self.auth_gateway.get_user(access_token)
        if user is None:
            return None
        profile = self.profile_repository.get_profile(user.id)
        is_admin = bool(profile and profile.is_admin)
        return SessionState(
            user=user,
            profile=profile,
            approved=is_admin or bool(profile and profile.is_approved),
            is_admin=is_admin,
            checked_at=datetime.now(tz=UTC),
        )


def _cache_key(access_token: str) -> str:
    digest = hashlib.sha256(access_token.encode()).hexdigest()
    return f"session:{digest}"
