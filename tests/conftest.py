"""Shared test fixtures."""

import time
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from kaja_tracker.adapters.resend_email_client import EmailClient
from kaja_tracker.config import Settings
from kaja_tracker.containers import AppContainer
from kaja_tracker.domain.holidays import Holiday
from kaja_tracker.domain.meals import MealRecordRow, Team
from kaja_tracker.domain.models import AuthUser, Profile
from kaja_tracker.services.access import AccessService, AuthGateway
from kaja_tracker.services.admin import AdminService
from kaja_tracker.services.cache import InMemoryCache
from kaja_tracker.services.calendar import MealCalendar, MealRecordRepository
from kaja_tracker.services.holidays import HolidayRepository, HolidayService
from kaja_tracker.services.profiles import ProfileRepository
from kaja_tracker.services.reminders import ReminderService
from kaja_tracker.services.stats import StatsService

TODAY = date(2026, 3, 18)
FLOOR = date(2026, 1, 1)
RECORDED_AT = datetime(2026, 3, 10, 11, 15, tzinfo=UTC)


def make_profile(
    email: str = "anna@example.com",
    full_name: str | None = "Kiss Anna",
    is_admin: bool = False,
    is_approved: bool = True,
) -> Profile:
    return Profile(
        id=uuid4(),
        email=email,
        full_name=full_name,
        avatar_url=None,
        is_admin=is_admin,
        is_approved=is_approved,
        created_at=RECORDED_AT,
    )


def make_record(  # noqa: PLR0913
    day: date,
    had_meal: bool = True,
    recorded_by: UUID | None = None,
    team: Team | None = None,
    meal_name: str | None = "Gulyás",
    reason: str | None = None,
) -> MealRecordRow:
    return MealRecordRow(
        id=uuid4(),
        day=day,
        had_meal=had_meal,
        meal_name=meal_name if had_meal else None,
        reason=None if had_meal else reason,
        recorded_by=recorded_by or uuid4(),
        team=team,
        created_at=RECORDED_AT,
    )


def make_holiday(day: date, name: str = "Nemzeti ünnep") -> Holiday:
    return Holiday(
        id=uuid4(), day=day, name=name, description=None, created_by=None
    )


@dataclass
class InMemoryMealRecordRepository(MealRecordRepository):
    """In-memory meal record repository for tests."""

    records: dict[date, MealRecordRow] = field(default_factory=dict)
    queries: list[tuple[date, date]] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False
    delay_seconds: float = 0.0

    def add(self, record: MealRecordRow) -> MealRecordRow:
        self.records[record.day] = record
        return record

    def list_records(self, start: date, end: date) -> list[MealRecordRow]:
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.fail_reads:
            raise RuntimeError("records unavailable")
        self.queries.append((start, end))
        return [
            self.records[day] for day in sorted(self.records) if start <= day <= end
        ]

    def upsert_record(  # noqa: PLR0913
        self,
        day: date,
        had_meal: bool,
        meal_name: str | None,
        reason: str | None,
        recorded_by: UUID,
        team: Team | None,
    ) -> MealRecordRow:
        if self.fail_writes:
            raise RuntimeError("write rejected")
        existing = self.records.get(day)
        record = MealRecordRow(
            id=existing.id if existing else uuid4(),
            day=day,
            had_meal=had_meal,
            meal_name=meal_name,
            reason=reason,
            recorded_by=recorded_by,
            team=team,
            created_at=RECORDED_AT,
        )
        self.records[day] = record
        return record

    def delete_record(self, day: date) -> None:
        if self.fail_writes:
            raise RuntimeError("write rejected")
        self.records.pop(day, None)


@dataclass
class InMemoryHolidayRepository(HolidayRepository):
    """In-memory holiday repository for tests."""

    holidays: dict[UUID, Holiday] = field(default_factory=dict)
    fail: bool = False

    def add(self, holiday: Holiday) -> Holiday:
        self.holidays[holiday.id] = holiday
        return holiday

    def list_holidays(
        self, start: date | None = None, end: date | None = None
    ) -> list[Holiday]:
        if self.fail:
            raise RuntimeError("holidays unavailable")
        return sorted(
            (
                holiday
                for holiday in self.holidays.values()
                if (start is None or holiday.day >= start)
                and (end is None or holiday.day <= end)
            ),
            key=lambda holiday: holiday.day,
        )

    def get_holiday(self, holiday_id: UUID) -> Holiday | None:
        if self.fail:
            raise RuntimeError("holidays unavailable")
        return self.holidays.get(holiday_id)

    def create_holiday(
        self,
        day: date,
        name: str,
        description: str | None,
        created_by: UUID,
    ) -> Holiday:
        if self.fail:
            raise RuntimeError("holidays unavailable")
        holiday = Holiday(
            id=uuid4(),
            day=day,
            name=name,
            description=description,
            created_by=created_by,
        )
        self.holidays[holiday.id] = holiday
        return holiday

    def delete_holiday(self, holiday_id: UUID) -> None:
        if self.fail:
            raise RuntimeError("holidays unavailable")
        self.holidays.pop(holiday_id, None)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, Profile] = field(default_factory=dict)
    lookups: int = 0
    fail: bool = False

    def add(self, profile: Profile) -> Profile:
        self.profiles[profile.id] = profile
        return profile

    def get_profile(self, user_id: UUID) -> Profile | None:
        self.lookups += 1
        return self.profiles.get(user_id)

    def list_profiles_by_ids(self, user_ids: list[UUID]) -> list[Profile]:
        if self.fail:
            raise RuntimeError("profiles unavailable")
        return [self.profiles[uid] for uid in user_ids if uid in self.profiles]

    def list_profiles(self) -> list[Profile]:
        if self.fail:
            raise RuntimeError("profiles unavailable")
        return list(self.profiles.values())

    def list_approved_profiles(self) -> list[Profile]:
        return [profile for profile in self.profiles.values() if profile.is_approved]

    def set_approved(self, user_id: UUID, approved: bool) -> Profile | None:
        if self.fail:
            raise RuntimeError("profiles unavailable")
        profile = self.profiles.get(user_id)
        if profile is None:
            return None
        updated = Profile(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
            is_admin=profile.is_admin,
            is_approved=approved,
            created_at=profile.created_at,
        )
        self.profiles[user_id] = updated
        return updated


@dataclass
class FakeAuthGateway(AuthGateway):
    """Fake auth gateway resolving tokens from a dict."""

    users: dict[str, AuthUser] = field(default_factory=dict)
    signed_out: list[str] = field(default_factory=list)
    calls: int = 0

    def get_user(self, access_token: str) -> AuthUser | None:
        self.calls += 1
        return self.users.get(access_token)

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)


@dataclass
class FakeEmailClient(EmailClient):
    """Fake email client that records sent messages."""

    sent: list[dict[str, object]] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)

    async def send_email(
        self, sender: str, to: list[str], subject: str, html: str
    ) -> dict[str, object]:
        if set(to) & self.failing:
            raise RuntimeError("mailbox unavailable")
        self.sent.append({"from": sender, "to": to, "subject": subject, "html": html})
        return {"id": f"email-{len(self.sent)}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        profile_webhook_secret="webhook-secret",
        site_url="https://kaja.example.com",
    )


@pytest.fixture
def record_repository() -> InMemoryMealRecordRepository:
    return InMemoryMealRecordRepository()


@pytest.fixture
def holiday_repository() -> InMemoryHolidayRepository:
    return InMemoryHolidayRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def auth_gateway() -> FakeAuthGateway:
    return FakeAuthGateway()


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def calendar(
    record_repository: InMemoryMealRecordRepository,
    holiday_repository: InMemoryHolidayRepository,
    profile_repository: InMemoryProfileRepository,
) -> MealCalendar:
    return MealCalendar(
        record_repository=record_repository,
        holiday_repository=holiday_repository,
        profile_repository=profile_repository,
        floor_date=FLOOR,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    calendar: MealCalendar,
    record_repository: InMemoryMealRecordRepository,
    holiday_repository: InMemoryHolidayRepository,
    profile_repository: InMemoryProfileRepository,
    auth_gateway: FakeAuthGateway,
    email_client: FakeEmailClient,
) -> AppContainer:
    access_service = AccessService(
        auth_gateway=auth_gateway,
        profile_repository=profile_repository,
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        calendar=calendar,
        stats_service=StatsService(
            record_repository=record_repository,
            holiday_repository=holiday_repository,
            floor_date=FLOOR,
        ),
        holiday_service=HolidayService(
            repository=holiday_repository, on_change=calendar.apply_holiday
        ),
        access_service=access_service,
        admin_service=AdminService(
            profile_repository=profile_repository,
            on_profile_change=access_service.invalidate_user,
        ),
        reminder_service=ReminderService(
            profile_repository=profile_repository,
            record_repository=record_repository,
            holiday_repository=holiday_repository,
            email_client=email_client,
            sender="kaja@example.com",
            app_url=settings.site_url,
            floor_date=FLOOR,
        ),
        today=lambda: TODAY,
        close_resources=close_resources,
    )
