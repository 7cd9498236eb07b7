"""Domain models for holidays."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class Holiday:
    """Administrator-declared date excluded from unfilled accounting."""

    id: UUID
    day: date
    name: str
    description: str | None
    created_by: UUID | None
    created_at: datetime | None = None
