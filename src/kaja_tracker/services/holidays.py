"""Holiday management."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from kaja_tracker.domain.holidays import Holiday
from kaja_tracker.messages import Notice

_logger = logging.getLogger(__name__)


class HolidayRepository(Protocol):
    """Persistence interface for holidays."""

    def list_holidays(
        self, start: date | None = None, end: date | None = None
    ) -> list[Holiday]:
        """Return holidays ordered by date, optionally within a range."""

    def get_holiday(self, holiday_id: UUID) -> Holiday | None:
        """Return a holiday by id."""

    def create_holiday(
        self,
        day: date,
        name: str,
        description: str | None,
        created_by: UUID,
    ) -> Holiday:
        """Create and return a holiday."""

    def delete_holiday(self, holiday_id: UUID) -> None:
        """Delete a holiday by id."""


class HolidayValidationError(Exception):
    """Raised when a holiday is missing required fields."""

    def __init__(self, notice: Notice = Notice.HOLIDAY_MISSING_FIELDS) -> None:
        super().__init__(str(notice))
        self.notice = notice


class HolidayLoadError(Exception):
    """Raised when holidays could not be listed."""

    def __init__(self, notice: Notice = Notice.HOLIDAYS_LOAD_FAILED) -> None:
        super().__init__(str(notice))
        self.notice = notice


class HolidayWriteError(Exception):
    """Raised when a holiday could not be stored or removed."""

    def __init__(self, notice: Notice) -> None:
        super().__init__(str(notice))
        self.notice = notice


OverlayCallback = Callable[[date, str | None], None]


@dataclass
class HolidayService:
    """Service for listing, adding and removing holidays."""

    repository: HolidayRepository
    on_change: OverlayCallback | None = None

    def list_holidays(self) -> list[Holiday]:
        """Return every holiday ordered by date."""
        try:
            return self.repository.list_holidays()
        except Exception as exc:
            _logger.exception("Failed to list holidays")
            raise HolidayLoadError() from exc

    def add_holiday(
        self,
        day: date | None,
        name: str | None,
        description: str | None,
        created_by: UUID,
    ) -> Holiday:
        """Validate and store a holiday."""
        cleaned_name = (name or "").strip()
        if day is None or not cleaned_name:
            raise HolidayValidationError()
        try:
            holiday = self.repository.create_holiday(
                day=day,
                name=cleaned_name,
                description=(description or "").strip() or None,
                created_by=created_by,
            )
        except Exception as exc:
            _logger.exception("Failed to add holiday %s", day)
            raise HolidayWriteError(Notice.HOLIDAY_ADD_FAILED) from exc
        if self.on_change:
            self.on_change(holiday.day, holiday.name)
        return holiday

    def delete_holiday(self, holiday_id: UUID) -> Holiday | None:
        """Delete a holiday and return the removed entry, if it existed."""
        try:
            existing = self.repository.get_holiday(holiday_id)
            if existing is None:
                return None
            self.repository.delete_holiday(holiday_id)
            remaining = self.repository.list_holidays(existing.day, existing.day)
        except Exception as exc:
            _logger.exception("Failed to delete holiday %s", holiday_id)
            raise HolidayWriteError(Notice.HOLIDAY_DELETE_FAILED) from exc
        if self.on_change:
            self.on_change(existing.day, remaining[0].name if remaining else None)
        return existing
