"""Domain models for meal records and calendar days."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID


class DayStatus(StrEnum):
    """Whether a staff meal was recorded for a day."""

    HAD = "had"
    NOT_HAD = "not_had"
    UNFILLED = "unfilled"


class Team(StrEnum):
    """The two crews a record can be tagged with."""

    A = "A"
    B = "B"


TEAM_NAMES = {Team.A: "Zs csapat", Team.B: "R csapat"}


@dataclass(frozen=True)
class MealRecordRow:
    """A stored meal record; at most one exists per date."""

    id: UUID
    day: date
    had_meal: bool
    meal_name: str | None
    reason: str | None
    recorded_by: UUID
    team: Team | None
    created_at: datetime | None


@dataclass(frozen=True)
class DayRecord:
    """Calendar view of one date: stored record merged with holiday overlay."""

    day: date
    status: DayStatus = DayStatus.UNFILLED
    meal_name: str | None = None
    reason: str | None = None
    team: Team | None = None
    recorded_by: str | None = None
    recorded_at: str | None = None
    is_holiday: bool = False
    holiday_name: str | None = None
