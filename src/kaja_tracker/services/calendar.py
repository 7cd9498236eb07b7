"""Meal calendar: a dense, incrementally loaded window of day records."""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from kaja_tracker.dates import (
    DateRange,
    clamp_range,
    format_date_key,
    is_future_date,
)
from kaja_tracker.domain.holidays import Holiday
from kaja_tracker.domain.meals import DayRecord, DayStatus, MealRecordRow, Team
from kaja_tracker.domain.models import Profile
from kaja_tracker.messages import UNKNOWN_RECORDER, Notice
from kaja_tracker.services.holidays import HolidayRepository
from kaja_tracker.services.profiles import ProfileRepository

_logger = logging.getLogger(__name__)


class MealRecordRepository(Protocol):
    """Persistence interface for meal records."""

    def list_records(self, start: date, end: date) -> list[MealRecordRow]:
        """Return records dated within the inclusive range."""

    def upsert_record(  # noqa: PLR0913
        self,
        day: date,
        had_meal: bool,
        meal_name: str | None,
        reason: str | None,
        recorded_by: UUID,
        team: Team | None,
    ) -> MealRecordRow:
        """Insert or replace the record for a date and return it."""

    def delete_record(self, day: date) -> None:
        """Delete the record for a date."""


class CalendarFetchError(Exception):
    """Raised when a window extension could not be fetched."""

    def __init__(self, notice: Notice = Notice.LOAD_FAILED) -> None:
        super().__init__(str(notice))
        self.notice = notice


class DayLockedError(Exception):
    """Raised when an edit targets a day that cannot be changed."""

    def __init__(self, notice: Notice) -> None:
        super().__init__(str(notice))
        self.notice = notice


class RecordWriteError(Exception):
    """Raised when saving or deleting a record failed."""

    def __init__(self, notice: Notice) -> None:
        super().__init__(str(notice))
        self.notice = notice


@dataclass
class MealCalendar:
    """Owns the loaded window of day records and every mutation of it.

    The window is a contiguous date range. Extensions fetch only the dates
    before or after the loaded bounds and are merged in one assignment, so
    readers never observe a half-updated window.
    Once ``ttl_seconds`` have passed since the first load, the next request
    refetches the whole window and swaps it in only when the fetch succeeds.
    """

    record_repository: MealRecordRepository
    holiday_repository: HolidayRepository
    profile_repository: ProfileRepository
    floor_date: date
    timezone_name: str = "Europe/Budapest"
    fetch_timeout_seconds: float = 10.0
    ttl_seconds: float = 300.0
    clock: Callable[[], float] = time.monotonic
    _days: list[DayRecord] = field(default_factory=list, init=False, repr=False)
    _loaded: DateRange | None = field(default=None, init=False, repr=False)
    _loaded_at: float = field(default=0.0, init=False, repr=False)
    _generation: int = field(default=0, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def loaded_range(self) -> DateRange | None:
        return self._loaded

    @property
    def days(self) -> tuple[DayRecord, ...]:
        return tuple(self._days)

    def days_in(self, window: DateRange) -> list[DayRecord]:
        """Return loaded days that fall inside ``window``."""
        return [day for day in self._days if window.start <= day.day <= window.end]

    def find(self, day: date) -> DayRecord | None:
        key = format_date_key(day)
        for entry in self._days:
            if format_date_key(entry.day) == key:
                return entry
        return None

    def total_unfilled(self, today: date) -> int:
        """Count past, non-holiday days of the loaded window without a record."""
        return sum(
            1
            for day in self._days
            if day.status == DayStatus.UNFILLED
            and not day.is_holiday
            and day.day <= today
        )

    async def ensure_loaded(self, requested: DateRange) -> None:
        """Extend the loaded window so it covers ``requested``.

        Requests are served one at a time; a request queued behind an
        in-flight fetch re-checks the window and returns without fetching
        when it is already covered.
        """
        requested = clamp_range(requested, self.floor_date)
        if requested.is_empty:
            return
        async with self._lock:
            refresh = self._is_expired()
            if refresh:
                missing = [self._loaded.union(requested)]
            else:
                missing = self._missing_ranges(requested)
            if not missing:
                return
            generation = self._generation
            try:
                batches = await asyncio.wait_for(
                    asyncio.gather(*(self._fetch_days(gap) for gap in missing)),
                    timeout=self.fetch_timeout_seconds,
                )
            except Exception as exc:
                _logger.exception(
                    "Failed to load meal calendar range %s..%s",
                    requested.start,
                    requested.end,
                )
                raise CalendarFetchError() from exc
            if generation != self._generation:
                _logger.info("Discarding calendar fetch for a reset window")
                return
            if refresh:
                _logger.info(
                    "Reloaded expired calendar window %s..%s",
                    missing[0].start,
                    missing[0].end,
                )
                self._days = []
                self._loaded = None
            self._merge(batches, missing[0] if refresh else requested)

    async def save_day(  # noqa: PLR0913
        self,
        day: date,
        had_meal: bool,
        details: str | None,
        team: Team | None,
        recorded_by: UUID,
        today: date,
    ) -> DayRecord:
        """Upsert the record for ``day`` and update its loaded entry."""
        await self._ensure_editable(day, today)
        text = (details or "").strip() or None
        try:
            row = await asyncio.wait_for(
                asyncio.to_thread(
                    self.record_repository.upsert_record,
                    day=day,
                    had_meal=had_meal,
                    meal_name=text if had_meal else None,
                    reason=None if had_meal else text,
                    recorded_by=recorded_by,
                    team=team,
                ),
                timeout=self.fetch_timeout_seconds,
            )
        except Exception as exc:
            _logger.exception("Failed to save meal record for %s", day)
            raise RecordWriteError(Notice.SAVE_FAILED) from exc

        profiles = await self._lookup_profiles({row.recorded_by})
        current = self.find(day)
        holiday_name = current.holiday_name if current else None
        updated = day_from_record(
            day, row, holiday_name, profiles.get(row.recorded_by), self._tz
        )
        self._replace_day(updated)
        return updated

    async def delete_day(self, day: date, today: date) -> DayRecord:
        """Delete the record for ``day`` and reset its loaded entry to unfilled."""
        await self._ensure_editable(day, today)
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.record_repository.delete_record, day),
                timeout=self.fetch_timeout_seconds,
            )
        except Exception as exc:
            _logger.exception("Failed to delete meal record for %s", day)
            raise RecordWriteError(Notice.DELETE_FAILED) from exc

        current = self.find(day)
        holiday_name = current.holiday_name if current else None
        cleared = day_from_record(day, None, holiday_name, None, self._tz)
        self._replace_day(cleared)
        return cleared

    def apply_holiday(self, day: date, holiday_name: str | None) -> None:
        """Set or clear the holiday overlay of a loaded day."""
        current = self.find(day)
        if current is None:
            return
        self._replace_day(
            replace(
                current,
                is_holiday=holiday_name is not None,
                holiday_name=holiday_name,
            )
        )

    def reset(self) -> None:
        """Discard the loaded window; in-flight fetches are ignored."""
        self._generation += 1
        self._days = []
        self._loaded = None

    def _is_expired(self) -> bool:
        return (
            self._loaded is not None
            and self.clock() - self._loaded_at >= self.ttl_seconds
        )

    @property
    def _tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def _missing_ranges(self, requested: DateRange) -> list[DateRange]:
        if self._loaded is None:
            return [requested]
        missing = []
        if requested.start < self._loaded.start:
            missing.append(
                DateRange(requested.start, self._loaded.start - timedelta(days=1))
            )
        if requested.end > self._loaded.end:
            missing.append(
                DateRange(self._loaded.end + timedelta(days=1), requested.end)
            )
        return missing

    async def _fetch_days(self, window: DateRange) -> list[DayRecord]:
        records, holidays = await asyncio.gather(
            asyncio.to_thread(
                self.record_repository.list_records, window.start, window.end
            ),
            asyncio.to_thread(
                self.holiday_repository.list_holidays, window.start, window.end
            ),
        )
        recorder_ids = {record.recorded_by for record in records}
        profiles = await self._lookup_profiles(recorder_ids)
        return build_days(window, records, holidays, profiles.values(), self._tz)

    async def _lookup_profiles(self, user_ids: set[UUID]) -> dict[UUID, Profile]:
        if not user_ids:
            return {}
        try:
            profiles = await asyncio.to_thread(
                self.profile_repository.list_profiles_by_ids,
                sorted(user_ids, key=str),
            )
        except Exception:
            _logger.warning(
                "Profile lookup failed; recorders shown as unknown", exc_info=True
            )
            return {}
        return {profile.id: profile for profile in profiles}

    def _merge(self, batches: list[list[DayRecord]], requested: DateRange) -> None:
        merged = {format_date_key(day.day): day for day in self._days}
        for batch in batches:
            for day in batch:
                merged.setdefault(format_date_key(day.day), day)
        if self._loaded is None:
            self._loaded_at = self.clock()
        loaded = requested if self._loaded is None else self._loaded.union(requested)
        self._days = [merged[key] for key in sorted(merged)]
        self._loaded = loaded

    def _replace_day(self, updated: DayRecord) -> None:
        key = format_date_key(updated.day)
        self._days = [
            updated if format_date_key(day.day) == key else day for day in self._days
        ]

    async def _ensure_editable(self, day: date, today: date) -> None:
        if day < self.floor_date:
            raise DayLockedError(Notice.BEFORE_START_LOCKED)
        if is_future_date(day, today):
            raise DayLockedError(Notice.FUTURE_LOCKED)
        current = self.find(day)
        if current is not None:
            if current.is_holiday:
                raise DayLockedError(Notice.HOLIDAY_LOCKED)
            return
        try:
            holidays = await asyncio.wait_for(
                asyncio.to_thread(self.holiday_repository.list_holidays, day, day),
                timeout=self.fetch_timeout_seconds,
            )
        except Exception as exc:
            _logger.exception("Failed to check holidays for %s", day)
            raise CalendarFetchError() from exc
        if holidays:
            raise DayLockedError(Notice.HOLIDAY_LOCKED)


def build_days(
    window: DateRange,
    records: Iterable[MealRecordRow],
    holidays: Iterable[Holiday],
    profiles: Iterable[Profile],
    tz: ZoneInfo,
) -> list[DayRecord]:
    """Build one day record per date of ``window`` from sparse rows."""
    records_by_key = {format_date_key(record.day): record for record in records}
    holidays_by_key = {
        format_date_key(holiday.day): holiday.name for holiday in holidays
    }
    profiles_by_id = {profile.id: profile for profile in profiles}
    days = []
    for day in window.days():
        key = format_date_key(day)
        record = records_by_key.get(key)
        profile = profiles_by_id.get(record.recorded_by) if record else None
        days.append(day_from_record(day, record, holidays_by_key.get(key), profile, tz))
    return days


def day_from_record(
    day: date,
    record: MealRecordRow | None,
    holiday_name: str | None,
    profile: Profile | None,
    tz: ZoneInfo,
) -> DayRecord:
    """Map a stored record (or its absence) and holiday overlay to a day."""
    is_holiday = holiday_name is not None
    if record is None:
        return DayRecord(day=day, is_holiday=is_holiday, holiday_name=holiday_name)
    return DayRecord(
        day=day,
        status=DayStatus.HAD if record.had_meal else DayStatus.NOT_HAD,
        meal_name=(record.meal_name or None) if record.had_meal else None,
        reason=None if record.had_meal else (record.reason or None),
        team=record.team,
        recorded_by=profile.display_name if profile else UNKNOWN_RECORDER,
        recorded_at=_format_time(record.created_at, tz),
        is_holiday=is_holiday,
        holiday_name=holiday_name,
    )


def _format_time(value: datetime | None, tz: ZoneInfo) -> str | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.strftime("%H:%M")
