"""Calendar date helpers shared by the calendar and statistics services."""

import calendar
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from zoneinfo import ZoneInfo


class View(StrEnum):
    """Calendar page granularity."""

    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates."""

    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    def contains(self, other: "DateRange") -> bool:
        """Return True when ``other`` lies fully inside this range."""
        return self.start <= other.start and other.end <= self.end

    def union(self, other: "DateRange") -> "DateRange":
        return DateRange(min(self.start, other.start), max(self.end, other.end))

    def days(self) -> Iterator[date]:
        """Iterate every date from start to end inclusive."""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


def to_day(value: date | datetime) -> date:
    """Normalize a date or datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def week_start(reference: date | datetime, offset_weeks: int = 0) -> date:
    """Return the Monday of the week ``offset_weeks`` away from ``reference``.

    Sunday belongs to the week that started six days earlier.
    """
    day = to_day(reference)
    monday = day - timedelta(days=day.weekday())
    return monday + timedelta(weeks=offset_weeks)


def week_range(reference: date | datetime, offset_weeks: int = 0) -> DateRange:
    start = week_start(reference, offset_weeks)
    return DateRange(start, start + timedelta(days=6))


def shift_month(reference: date | datetime, offset_months: int) -> date:
    """Return the first day of the month ``offset_months`` from ``reference``."""
    day = to_day(reference)
    index = day.year * 12 + (day.month - 1) + offset_months
    return date(index // 12, index % 12 + 1, 1)


def month_range(reference: date | datetime, offset_months: int = 0) -> DateRange:
    first = shift_month(reference, offset_months)
    last_day = calendar.monthrange(first.year, first.month)[1]
    return DateRange(first, first.replace(day=last_day))


def year_range(year: int) -> DateRange:
    return DateRange(date(year, 1, 1), date(year, 12, 31))


def required_range(
    view: View, offset: int, today: date | datetime, floor: date | None = None
) -> DateRange:
    """Return the dates a calendar page at ``offset`` displays.

    With a ``floor`` the start never precedes it; a page wholly before the
    floor comes back empty.
    """
    if view == View.WEEK:
        page = week_range(today, offset)
    else:
        page = month_range(today, offset)
    return page if floor is None else clamp_range(page, floor)


def pad_range(value: DateRange, months: int) -> DateRange:
    """Widen a range to whole months, ``months`` before and after."""
    start = shift_month(value.start, -months)
    end = month_range(value.end, months).end
    return DateRange(start, end)


def clamp_range(value: DateRange, floor: date) -> DateRange:
    """Drop the part of a range that precedes ``floor``.

    The result may be empty when the whole range is before the floor.
    """
    return DateRange(max(value.start, floor), value.end)


def horizon_end(today: date | datetime, months: int) -> date:
    """Return the last date a calendar page may reach, ``months`` ahead."""
    return month_range(today, months).end


def format_date_key(value: date | datetime) -> str:
    """Return a zero-padded ``YYYY-MM-DD`` key built from the local date."""
    day = to_day(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date_key(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` key, ignoring any time suffix."""
    return date.fromisoformat(value[:10])


def is_future_date(value: date | datetime, today: date | datetime) -> bool:
    return to_day(value) > to_day(today)


def is_same_day(first: date | datetime, second: date | datetime) -> bool:
    return to_day(first) == to_day(second)


def can_navigate_back(
    view: View, offset: int, today: date | datetime, floor: date
) -> bool:
    """Return True when the previous calendar page still shows data."""
    if view == View.WEEK:
        return week_range(today, offset - 1).end >= floor
    return shift_month(today, offset - 1) >= floor


def local_today(timezone_name: str) -> date:
    """Return today's date in the given timezone."""
    return datetime.now(tz=ZoneInfo(timezone_name)).date()
