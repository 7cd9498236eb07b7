"""Pydantic models for API request bodies and webhook payloads."""

from datetime import date

from pydantic import BaseModel, Field

from kaja_tracker.domain.meals import Team


class SaveDayRequest(BaseModel):
    """Meal record submitted for one day."""

    had_meal: bool
    details: str | None = None
    team: Team | None = None


class HolidayCreateRequest(BaseModel):
    """New holiday; date and name are validated by the holiday service."""

    day: date | None = Field(default=None, alias="date")
    name: str | None = None
    description: str | None = None


class ProfileWebhookPayload(BaseModel):
    """Supabase database webhook payload for the profiles table."""

    type: str
    table: str
    record: dict[str, object] | None = None
    old_record: dict[str, object] | None = None
