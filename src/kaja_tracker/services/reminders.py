"""Daily reminder emails for unrecorded meal days."""

import asyncio
import html
import logging
from dataclasses import dataclass, field
from datetime import date

from kaja_tracker.adapters.resend_email_client import EmailClient
from kaja_tracker.dates import format_date_key
from kaja_tracker.domain.models import Profile
from kaja_tracker.services.calendar import MealRecordRepository
from kaja_tracker.services.holidays import HolidayRepository
from kaja_tracker.services.profiles import ProfileRepository

_logger = logging.getLogger(__name__)

REMINDER_SUBJECT = "Emlékeztető: Mai étkezés rögzítése"


@dataclass(frozen=True)
class ReminderResult:
    """Delivery outcome for one recipient."""

    email: str
    sent: bool
    error: str | None = None


@dataclass(frozen=True)
class ReminderRun:
    """Outcome of a daily reminder run."""

    day: date
    skipped_reason: str | None = None
    results: list[ReminderResult] = field(default_factory=list)


@dataclass
class ReminderService:
    """Emails approved users when today's meal has not been recorded."""

    profile_repository: ProfileRepository
    record_repository: MealRecordRepository
    holiday_repository: HolidayRepository
    email_client: EmailClient | None
    sender: str
    app_url: str
    floor_date: date

    async def send_daily_reminders(self, today: date) -> ReminderRun:
        """Send reminders for ``today`` unless there is nothing to remind."""
        if today < self.floor_date:
            return ReminderRun(day=today, skipped_reason="before_start")
        if self.email_client is None:
            _logger.warning("Reminder email client is not configured")
            return ReminderRun(day=today, skipped_reason="not_configured")
        if self.record_repository.list_records(today, today):
            return ReminderRun(day=today, skipped_reason="already_recorded")
        if self.holiday_repository.list_holidays(today, today):
            return ReminderRun(day=today, skipped_reason="holiday")

        recipients = self.profile_repository.list_approved_profiles()
        if not recipients:
            return ReminderRun(day=today, skipped_reason="no_recipients")

        _logger.info("Sending %s reminder emails for %s", len(recipients), today)
        results = await asyncio.gather(
            *(self._send(profile, today) for profile in recipients)
        )
        return ReminderRun(day=today, results=list(results))

    async def _send(self, profile: Profile, today: date) -> ReminderResult:
        try:
            await self.email_client.send_email(
                sender=self.sender,
                to=[profile.email],
                subject=REMINDER_SUBJECT,
                html=_render_body(profile, format_date_key(today), self.app_url),
            )
        except Exception as exc:
            _logger.exception("Failed to send reminder to %s", profile.email)
            return ReminderResult(email=profile.email, sent=False, error=str(exc))
        return ReminderResult(email=profile.email, sent=True)


def _render_body(profile: Profile, day_key: str, app_url: str) -> str:
    name = html.escape(profile.full_name or "Kolléga")
    return (
        '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
        f"<h2>Szia {name}!</h2>"
        "<p>Még nem rögzítetted a mai "
        f"(<strong>{day_key}</strong>) étkezést a személyzeti rendszerben.</p>"
        f'<p><a href="{html.escape(app_url)}">Rögzítés most</a></p>'
        "<p>Üdvözlettel,<br><strong>Személyzeti Rendszer</strong></p>"
        "</div>"
    )
