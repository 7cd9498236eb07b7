"""Statistics over meal records: periods, teams, streaks and history."""

import asyncio
import calendar
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from zoneinfo import ZoneInfo

from kaja_tracker.dates import (
    DateRange,
    clamp_range,
    format_date_key,
    is_future_date,
    month_range,
    week_range,
    year_range,
)
from kaja_tracker.domain.holidays import Holiday
from kaja_tracker.domain.meals import DayRecord, DayStatus, MealRecordRow, Team
from kaja_tracker.domain.stats import MonthHistory, PeriodStats, Streaks, TeamTally
from kaja_tracker.messages import MONTH_NAMES, Notice
from kaja_tracker.services.calendar import MealRecordRepository, build_days
from kaja_tracker.services.holidays import HolidayRepository

_logger = logging.getLogger(__name__)


class StatsUnavailableError(Exception):
    """Raised when statistics could not be loaded and nothing is cached."""

    def __init__(self, notice: Notice = Notice.STATS_FAILED) -> None:
        super().__init__(str(notice))
        self.notice = notice


@dataclass(frozen=True)
class StatsOverview:
    """Week, month and year statistics with team breakdowns."""

    today: date
    week: PeriodStats
    month: PeriodStats
    year: PeriodStats
    teams: dict[str, dict[Team, PeriodStats]]
    streaks: Streaks
    history_years: list[int]
    notice: str | None = None


@dataclass(frozen=True)
class _Snapshot:
    window: DateRange
    records: list[MealRecordRow]
    holidays: list[Holiday]


def calculate_period_stats(days: Iterable[DayRecord], today: date) -> PeriodStats:
    """Classify each day into exactly one bucket, holidays first.

    Unfilled days after ``today`` fall into no bucket but still count toward
    ``total_days``.
    """
    had_meal = no_meal = unfilled = holidays = elapsed = total = 0
    for day in days:
        total += 1
        is_elapsed = not is_future_date(day.day, today)
        if is_elapsed:
            elapsed += 1
        if day.is_holiday:
            holidays += 1
        elif day.status == DayStatus.HAD:
            had_meal += 1
        elif day.status == DayStatus.NOT_HAD:
            no_meal += 1
        elif is_elapsed:
            unfilled += 1
    return PeriodStats(
        had_meal=had_meal,
        no_meal=no_meal,
        unfilled=unfilled,
        holidays=holidays,
        total_days=total,
        elapsed_days=elapsed,
    )


def calculate_team_stats(team: Team, days: Iterable[DayRecord]) -> PeriodStats:
    """Count had/no meal days tagged with ``team``."""
    tagged = [day for day in days if day.team == team]
    return PeriodStats(
        had_meal=sum(1 for day in tagged if day.status == DayStatus.HAD),
        no_meal=sum(1 for day in tagged if day.status == DayStatus.NOT_HAD),
        total_days=len(tagged),
        elapsed_days=len(tagged),
    )


def calculate_streaks(records: Iterable[MealRecordRow]) -> Streaks:
    """Return the current and longest runs of consecutive meal records."""
    ordered = sorted(records, key=lambda record: record.day)
    current = 0
    for record in reversed(ordered):
        if not record.had_meal:
            break
        current += 1
    longest = run = 0
    for record in ordered:
        run = run + 1 if record.had_meal else 0
        longest = max(longest, run)
    return Streaks(current=current, longest=longest)


def history_years(records: Iterable[MealRecordRow], today: date) -> list[int]:
    years = {record.day.year for record in records}
    years.add(today.year)
    return sorted(years, reverse=True)


def history_by_month(
    year: int,
    records: Iterable[MealRecordRow],
    holidays: Iterable[Holiday],
    today: date,
) -> list[MonthHistory]:
    """Summarize each month of ``year`` that has a record or a holiday."""
    year_records = [record for record in records if record.day.year == year]
    year_holidays = [holiday for holiday in holidays if holiday.day.year == year]
    record_keys = {format_date_key(record.day) for record in year_records}
    holiday_keys = {format_date_key(holiday.day) for holiday in year_holidays}

    months = []
    for month in range(1, 13):
        month_records = [r for r in year_records if r.day.month == month]
        month_holidays = sum(1 for h in year_holidays if h.day.month == month)
        if not month_records and not month_holidays:
            continue
        window = month_range(date(year, month, 1))
        unfilled = sum(
            1
            for day in window.days()
            if not is_future_date(day, today)
            and format_date_key(day) not in record_keys
            and format_date_key(day) not in holiday_keys
        )
        teams = {
            team: TeamTally(
                had=sum(1 for r in month_records if r.team == team and r.had_meal),
                no=sum(1 for r in month_records if r.team == team and not r.had_meal),
            )
            for team in Team
        }
        days_in_month = calendar.monthrange(year, month)[1]
        months.append(
            MonthHistory(
                month=month,
                name=MONTH_NAMES[month - 1],
                teams=teams,
                total=PeriodStats(
                    had_meal=sum(1 for r in month_records if r.had_meal),
                    no_meal=sum(1 for r in month_records if not r.had_meal),
                    unfilled=unfilled,
                    holidays=month_holidays,
                    total_days=days_in_month,
                    elapsed_days=sum(
                        1 for day in window.days() if not is_future_date(day, today)
                    ),
                ),
                days_in_month=days_in_month,
            )
        )
    return months


@dataclass
class StatsService:
    """Loads records and holidays and derives statistics views.

    The last successful load of each window is kept so a failed refresh can
    still answer with stale figures and a notice.
    """

    record_repository: MealRecordRepository
    holiday_repository: HolidayRepository
    floor_date: date
    timezone_name: str = "Europe/Budapest"
    fetch_timeout_seconds: float = 10.0
    _snapshots: dict[DateRange, _Snapshot] = field(
        default_factory=dict, init=False, repr=False
    )

    async def overview(self, today: date) -> StatsOverview:
        """Return week, month and year statistics around ``today``."""
        window = DateRange(date(today.year - 1, 1, 1), date(today.year, 12, 31))
        snapshot, notice = await self._load(window)
        days = self._days(snapshot)
        week_days = _within(days, week_range(today))
        month_days = _within(days, month_range(today))
        year_days = _within(days, year_range(today.year))
        return StatsOverview(
            today=today,
            week=calculate_period_stats(week_days, today),
            month=calculate_period_stats(month_days, today),
            year=calculate_period_stats(year_days, today),
            teams={
                "week": {team: calculate_team_stats(team, week_days) for team in Team},
                "month": {
                    team: calculate_team_stats(team, month_days) for team in Team
                },
                "year": {team: calculate_team_stats(team, year_days) for team in Team},
            },
            streaks=calculate_streaks(
                record for record in snapshot.records if record.day <= today
            ),
            history_years=history_years(snapshot.records, today),
            notice=notice,
        )

    async def history(
        self, year: int, today: date
    ) -> tuple[list[MonthHistory], str | None]:
        """Return the monthly history of ``year`` and an optional notice."""
        snapshot, notice = await self._load(year_range(year))
        return (
            history_by_month(year, snapshot.records, snapshot.holidays, today),
            notice,
        )

    async def _load(self, window: DateRange) -> tuple[_Snapshot, str | None]:
        window = clamp_range(window, self.floor_date)
        if window.is_empty:
            return _Snapshot(window=window, records=[], holidays=[]), None
        try:
            records, holidays = await asyncio.wait_for(
                asyncio.gather(
                    asyncio.to_thread(
                        self.record_repository.list_records, window.start, window.end
                    ),
                    asyncio.to_thread(
                        self.holiday_repository.list_holidays,
                        window.start,
                        window.end,
                    ),
                ),
                timeout=self.fetch_timeout_seconds,
            )
        except Exception as exc:
            _logger.exception(
                "Failed to load statistics %s..%s", window.start, window.end
            )
            cached = self._snapshots.get(window)
            if cached is None:
                raise StatsUnavailableError() from exc
            return cached, str(Notice.STATS_FAILED)
        snapshot = _Snapshot(window=window, records=records, holidays=holidays)
        self._snapshots[window] = snapshot
        return snapshot, None

    def _days(self, snapshot: _Snapshot) -> list[DayRecord]:
        if snapshot.window.is_empty:
            return []
        return build_days(
            snapshot.window,
            snapshot.records,
            snapshot.holidays,
            [],
            ZoneInfo(self.timezone_name),
        )


def _within(days: Sequence[DayRecord], window: DateRange) -> list[DayRecord]:
    return [day for day in days if window.start <= day.day <= window.end]

