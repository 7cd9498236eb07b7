"""Supabase repository for holidays."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from kaja_tracker.dates import format_date_key, parse_date_key
from kaja_tracker.domain.holidays import Holiday
from kaja_tracker.services.holidays import HolidayRepository

_COLUMNS = "id, date, name, description, created_by, created_at"


@dataclass
class SupabaseHolidayRepository(HolidayRepository):
    """Supabase implementation for holiday persistence."""

    client: Client

    def list_holidays(
        self, start: date | None = None, end: date | None = None
    ) -> list[Holiday]:
        """Return holidays ordered by date, optionally within a range."""
        query = self.client.table("holidays").select(_COLUMNS)
        if start is not None:
            query = query.gte("date", format_date_key(start))
        if end is not None:
            query = query.lte("date", format_date_key(end))
        response = query.order("date", desc=False).execute()
        return [_parse_row(row) for row in response.data or []]

    def get_holiday(self, holiday_id: UUID) -> Holiday | None:
        """Return a holiday by id."""
        response = (
            self.client.table("holidays")
            .select(_COLUMNS)
            .eq("id", str(holiday_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def create_holiday(
        self,
        day: date,
        name: str,
        description: str | None,
        created_by: UUID,
    ) -> Holiday:
        """Create a holiday row and return it."""
        response = (
            self.client.table("holidays")
            .insert(
                {
                    "date": format_date_key(day),
                    "name": name,
                    "description": description,
                    "created_by": str(created_by),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create holiday in Supabase")
        return _parse_row(response.data[0])

    def delete_holiday(self, holiday_id: UUID) -> None:
        """Delete a holiday by id."""
        self.client.table("holidays").delete().eq("id", str(holiday_id)).execute()


def _parse_row(row: dict[str, object]) -> Holiday:
    created_by = row.get("created_by")
    created_raw = row.get("created_at")
    return Holiday(
        id=UUID(str(row["id"])),
        day=parse_date_key(str(row["date"])),
        name=str(row.get("name", "")),
        description=row.get("description"),
        created_by=UUID(str(created_by)) if created_by else None,
        created_at=datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None,
    )
