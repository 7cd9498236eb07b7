"""Domain models for statistics."""

from dataclasses import dataclass, field

from kaja_tracker.domain.meals import Team


@dataclass(frozen=True)
class PeriodStats:
    """Mutually exclusive day counts over a period."""

    had_meal: int = 0
    no_meal: int = 0
    unfilled: int = 0
    holidays: int = 0
    total_days: int = 0
    elapsed_days: int = 0


@dataclass(frozen=True)
class Streaks:
    """Consecutive meal-day runs."""

    current: int
    longest: int


@dataclass(frozen=True)
class TeamTally:
    """Had/no meal counts for one team."""

    had: int = 0
    no: int = 0


@dataclass(frozen=True)
class MonthHistory:
    """Per-month summary in the yearly history."""

    month: int
    name: str
    teams: dict[Team, TeamTally] = field(default_factory=dict)
    total: PeriodStats = field(default_factory=PeriodStats)
    days_in_month: int = 0
