"""Admin service for user approval."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from kaja_tracker.domain.models import Profile
from kaja_tracker.messages import Notice
from kaja_tracker.services.profiles import ProfileRepository

_logger = logging.getLogger(__name__)


class AdminActionError(Exception):
    """Raised when an admin read or update failed."""

    def __init__(self, notice: Notice) -> None:
        super().__init__(str(notice))
        self.notice = notice


@dataclass
class AdminService:
    """Service for listing users and toggling their approval."""

    profile_repository: ProfileRepository
    on_profile_change: Callable[[UUID], None] | None = None

    def list_users(self) -> list[Profile]:
        """Return every profile, newest first."""
        try:
            return self.profile_repository.list_profiles()
        except Exception as exc:
            _logger.exception("Failed to list profiles")
            raise AdminActionError(Notice.USERS_LOAD_FAILED) from exc

    def approve(self, user_id: UUID) -> Profile | None:
        """Grant access to a user."""
        return self._set_approved(user_id, approved=True)

    def revoke(self, user_id: UUID) -> Profile | None:
        """Withdraw a user's access."""
        return self._set_approved(user_id, approved=False)

    def _set_approved(self, user_id: UUID, approved: bool) -> Profile | None:
        try:
            profile = self.profile_repository.set_approved(user_id, approved)
        except Exception as exc:
            _logger.exception("Failed to update approval for %s", user_id)
            raise AdminActionError(Notice.APPROVAL_FAILED) from exc
        if self.on_profile_change:
            self.on_profile_change(user_id)
        _logger.info("Approval for %s set to %s", user_id, approved)
        return profile
