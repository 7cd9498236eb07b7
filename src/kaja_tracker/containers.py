"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from functools import partial

from supabase import create_client

from kaja_tracker.adapters.resend_email_client import HttpxResendClient
from kaja_tracker.adapters.supabase_auth_gateway import SupabaseAuthGateway
from kaja_tracker.adapters.supabase_holiday_repository import (
    SupabaseHolidayRepository,
)
from kaja_tracker.adapters.supabase_meal_record_repository import (
    SupabaseMealRecordRepository,
)
from kaja_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from kaja_tracker.config import Settings
from kaja_tracker.dates import local_today
from kaja_tracker.services.access import AccessService
from kaja_tracker.services.admin import AdminService
from kaja_tracker.services.cache import InMemoryCache
from kaja_tracker.services.calendar import MealCalendar
from kaja_tracker.services.holidays import HolidayService
from kaja_tracker.services.reminders import ReminderService
from kaja_tracker.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    calendar: MealCalendar
    stats_service: StatsService
    holiday_service: HolidayService
    access_service: AccessService
    admin_service: AdminService
    reminder_service: ReminderService
    today: Callable[[], date]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    record_repository = SupabaseMealRecordRepository(supabase_client)
    holiday_repository = SupabaseHolidayRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)
    auth_gateway = SupabaseAuthGateway(supabase_client)

    calendar = MealCalendar(
        record_repository=record_repository,
        holiday_repository=holiday_repository,
        profile_repository=profile_repository,
        floor_date=resolved_settings.floor_date,
        timezone_name=resolved_settings.timezone,
        fetch_timeout_seconds=resolved_settings.fetch_timeout_seconds,
        ttl_seconds=resolved_settings.calendar_ttl_seconds,
    )
    stats_service = StatsService(
        record_repository=record_repository,
        holiday_repository=holiday_repository,
        floor_date=resolved_settings.floor_date,
        timezone_name=resolved_settings.timezone,
        fetch_timeout_seconds=resolved_settings.fetch_timeout_seconds,
    )
    holiday_service = HolidayService(
        repository=holiday_repository, on_change=calendar.apply_holiday
    )
    access_service = AccessService(
        auth_gateway=auth_gateway,
        profile_repository=profile_repository,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.session_ttl_seconds,
        timeout_seconds=resolved_settings.auth_timeout_seconds,
    )
    admin_service = AdminService(
        profile_repository=profile_repository,
        on_profile_change=access_service.invalidate_user,
    )
    email_client = (
        HttpxResendClient.create(resolved_settings.resend_api_key)
        if resolved_settings.resend_api_key
        else None
    )
    reminder_service = ReminderService(
        profile_repository=profile_repository,
        record_repository=record_repository,
        holiday_repository=holiday_repository,
        email_client=email_client,
        sender=resolved_settings.reminder_from_address,
        app_url=resolved_settings.site_url,
        floor_date=resolved_settings.floor_date,
    )

    async def close_resources() -> None:
        if email_client is not None:
            await email_client.close()

    return AppContainer(
        settings=resolved_settings,
        calendar=calendar,
        stats_service=stats_service,
        holiday_service=holiday_service,
        access_service=access_service,
        admin_service=admin_service,
        reminder_service=reminder_service,
        today=partial(local_today, resolved_settings.timezone),
        close_resources=close_resources,
    )
