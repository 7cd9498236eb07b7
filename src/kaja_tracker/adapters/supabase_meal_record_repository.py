"""Supabase repository for meal records."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from kaja_tracker.dates import format_date_key, parse_date_key
from kaja_tracker.domain.meals import MealRecordRow, Team
from kaja_tracker.services.calendar import MealRecordRepository

_COLUMNS = "id, date, had_meal, meal_name, reason, recorded_by, team, created_at"


@dataclass
class SupabaseMealRecordRepository(MealRecordRepository):
    """Supabase implementation for meal records keyed by date."""

    client: Client

    def list_records(self, start: date, end: date) -> list[MealRecordRow]:
        """Return records dated within the inclusive range."""
        response = (
            self.client.table("meal_records")
            .select(_COLUMNS)
            .gte("date", format_date_key(start))
            .lte("date", format_date_key(end))
            .order("date", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def upsert_record(  # noqa: PLR0913
        self,
        day: date,
        had_meal: bool,
        meal_name: str | None,
        reason: str | None,
        recorded_by: UUID,
        team: Team | None,
    ) -> MealRecordRow:
        """Insert or replace the record for a date."""
        response = (
            self.client.table("meal_records")
            .upsert(
                {
                    "date": format_date_key(day),
                    "had_meal": had_meal,
                    "meal_name": meal_name,
                    "reason": reason,
                    "recorded_by": str(recorded_by),
                    "team": team.value if team else None,
                },
                on_conflict="date",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save meal record in Supabase")
        return _parse_row(response.data[0])

    def delete_record(self, day: date) -> None:
        """Delete the record for a date."""
        self.client.table("meal_records").delete().eq(
            "date", format_date_key(day)
        ).execute()


def _parse_row(row: dict[str, object]) -> MealRecordRow:
    created_raw = row.get("created_at")
    team_raw = row.get("team")
    return MealRecordRow(
        id=UUID(str(row["id"])),
        day=parse_date_key(str(row["date"])),
        had_meal=bool(row.get("had_meal")),
        meal_name=row.get("meal_name"),
        reason=row.get("reason"),
        recorded_by=UUID(str(row["recorded_by"])),
        team=Team(team_raw) if team_raw in {"A", "B"} else None,
        created_at=datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None,
    )
