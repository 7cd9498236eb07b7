"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from kaja_tracker.api.admin import router as admin_router
from kaja_tracker.api.admin import serialize_profile
from kaja_tracker.api.dependencies import (
    bearer_token,
    require_admin_profile,
    require_approved,
    require_session,
)
from kaja_tracker.api.models import (
    HolidayCreateRequest,
    ProfileWebhookPayload,
    SaveDayRequest,
)
from kaja_tracker.app_logging import configure_logging
from kaja_tracker.config import auth_redirect_url
from kaja_tracker.containers import AppContainer
from kaja_tracker.dates import (
    DateRange,
    View,
    can_navigate_back,
    format_date_key,
    horizon_end,
    pad_range,
    required_range,
)
from kaja_tracker.domain.holidays import Holiday
from kaja_tracker.domain.meals import TEAM_NAMES, DayRecord, Team
from kaja_tracker.domain.stats import MonthHistory, PeriodStats
from kaja_tracker.messages import Notice
from kaja_tracker.services.access import SessionState
from kaja_tracker.services.admin import AdminActionError
from kaja_tracker.services.calendar import (
    CalendarFetchError,
    DayLockedError,
    RecordWriteError,
)
from kaja_tracker.services.holidays import (
    HolidayLoadError,
    HolidayValidationError,
    HolidayWriteError,
)
from kaja_tracker.services.stats import (
    StatsOverview,
    StatsUnavailableError,
    calculate_period_stats,
)

MAX_PAGE_OFFSET = 1200

_NOTICE_ERROR_STATUS: dict[type[Exception], int] = {
    DayLockedError: 422,
    HolidayValidationError: 422,
    RecordWriteError: status.HTTP_502_BAD_GATEWAY,
    CalendarFetchError: status.HTTP_502_BAD_GATEWAY,
    HolidayLoadError: status.HTTP_502_BAD_GATEWAY,
    HolidayWriteError: status.HTTP_502_BAD_GATEWAY,
    AdminActionError: status.HTTP_502_BAD_GATEWAY,
    StatsUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    for error_type, status_code in _NOTICE_ERROR_STATUS.items():
        app.add_exception_handler(error_type, _notice_handler(status_code))

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/auth/config")
    async def auth_config(request: Request) -> dict[str, str]:
        """Return where the identity provider should redirect after sign-in."""
        state_container: AppContainer = request.app.state.container
        return {"redirect_url": auth_redirect_url(state_container.settings.site_url)}

    @app.post("/auth/sign-out")
    async def sign_out(
        request: Request, authorization: str | None = Header(default=None)
    ) -> dict[str, str]:
        """End the caller's session."""
        state_container: AppContainer = request.app.state.container
        token = bearer_token(authorization)
        if token is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        await state_container.access_service.sign_out(token)
        return {"status": "ok"}

    @app.get("/auth/me")
    async def me(session: SessionState = Depends(require_session)) -> dict[str, object]:
        """Return the caller's identity and approval state."""
        return {
            "user": {"id": str(session.user.id), "email": session.user.email},
            "profile": serialize_profile(session.profile) if session.profile else None,
            "approved": session.approved,
            "is_admin": session.is_admin,
        }

    @app.get("/calendar/{view}")
    async def calendar_page(
        view: View,
        request: Request,
        offset: int = Query(default=0, ge=-MAX_PAGE_OFFSET, le=MAX_PAGE_OFFSET),
        session: SessionState = Depends(require_approved),
    ) -> dict[str, object]:
        """Return one week or month page of the meal calendar."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        today = state_container.today()
        required = required_range(view, offset, today, settings.floor_date)
        horizon = horizon_end(today, settings.calendar_horizon_months)
        if required.is_empty or required.start > horizon:
            raise HTTPException(status_code=422, detail=str(Notice.OUT_OF_RANGE))
        padded = pad_range(required, settings.window_padding_months)
        notice = None
        try:
            await state_container.calendar.ensure_loaded(
                DateRange(padded.start, min(padded.end, max(horizon, required.end)))
            )
        except CalendarFetchError as exc:
            notice = str(exc.notice)
        days = state_container.calendar.days_in(required)
        return {
            "view": view.value,
            "offset": offset,
            "start": format_date_key(required.start),
            "end": format_date_key(required.end),
            "days": [_serialize_day(day) for day in days],
            "stats": _serialize_period(calculate_period_stats(days, today)),
            "total_unfilled": state_container.calendar.total_unfilled(today),
            "can_navigate_back": can_navigate_back(
                view, offset, today, settings.floor_date
            ),
            "notice": notice,
        }

    @app.put("/calendar/days/{day}")
    async def save_day(
        day: date,
        payload: SaveDayRequest,
        request: Request,
        session: SessionState = Depends(require_approved),
    ) -> dict[str, object]:
        """Record whether a meal was had on ``day``."""
        state_container: AppContainer = request.app.state.container
        today = state_container.today()
        record = await state_container.calendar.save_day(
            day=day,
            had_meal=payload.had_meal,
            details=payload.details,
            team=payload.team,
            recorded_by=session.user.id,
            today=today,
        )
        return {
            "day": _serialize_day(record),
            "total_unfilled": state_container.calendar.total_unfilled(today),
        }

    @app.delete("/calendar/days/{day}")
    async def delete_day(
        day: date,
        request: Request,
        session: SessionState = Depends(require_approved),
    ) -> dict[str, object]:
        """Clear the record of ``day``."""
        state_container: AppContainer = request.app.state.container
        today = state_container.today()
        record = await state_container.calendar.delete_day(day, today)
        return {
            "day": _serialize_day(record),
            "total_unfilled": state_container.calendar.total_unfilled(today),
        }

    @app.get("/stats/overview")
    async def stats_overview(
        request: Request, session: SessionState = Depends(require_approved)
    ) -> dict[str, object]:
        """Return week, month and year statistics."""
        state_container: AppContainer = request.app.state.container
        overview = await state_container.stats_service.overview(
            state_container.today()
        )
        return _serialize_overview(overview)

    @app.get("/stats/history/{year}")
    async def stats_history(
        year: int, request: Request, session: SessionState = Depends(require_approved)
    ) -> dict[str, object]:
        """Return the monthly history of ``year``."""
        state_container: AppContainer = request.app.state.container
        months, notice = await state_container.stats_service.history(
            year, state_container.today()
        )
        return {
            "year": year,
            "months": [_serialize_month(month) for month in months],
            "notice": notice,
        }

    @app.get("/holidays")
    async def list_holidays(
        request: Request, session: SessionState = Depends(require_approved)
    ) -> dict[str, object]:
        """Return every holiday ordered by date."""
        state_container: AppContainer = request.app.state.container
        holidays = state_container.holiday_service.list_holidays()
        return {"holidays": [_serialize_holiday(holiday) for holiday in holidays]}

    @app.post("/holidays")
    async def add_holiday(
        payload: HolidayCreateRequest,
        request: Request,
        session: SessionState = Depends(require_admin_profile),
    ) -> dict[str, object]:
        """Declare a holiday."""
        state_container: AppContainer = request.app.state.container
        holiday = state_container.holiday_service.add_holiday(
            day=payload.day,
            name=payload.name,
            description=payload.description,
            created_by=session.user.id,
        )
        logger.info("Holiday %s added by %s", holiday.day, session.user.id)
        return {"holiday": _serialize_holiday(holiday)}

    @app.delete("/holidays/{holiday_id}")
    async def delete_holiday(
        holiday_id: UUID,
        request: Request,
        session: SessionState = Depends(require_admin_profile),
    ) -> dict[str, str]:
        """Remove a holiday."""
        state_container: AppContainer = request.app.state.container
        removed = state_container.holiday_service.delete_holiday(holiday_id)
        if removed is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        logger.info("Holiday %s removed by %s", removed.day, session.user.id)
        return {"status": "ok"}

    @app.post("/hooks/profile-changed")
    async def profile_changed(
        payload: ProfileWebhookPayload,
        request: Request,
        x_webhook_secret: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Drop cached sessions of a user whose profile row changed."""
        state_container: AppContainer = request.app.state.container
        secret = state_container.settings.profile_webhook_secret
        if not secret or x_webhook_secret != secret:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        row = payload.record or payload.old_record or {}
        raw_id = row.get("id")
        if payload.table != "profiles" or raw_id is None:
            return {"status": "ignored"}
        try:
            user_id = UUID(str(raw_id))
        except ValueError as exc:
            raise HTTPException(status_code=422) from exc
        state_container.access_service.invalidate_user(user_id)
        logger.info("Profile %s changed (%s)", user_id, payload.type)
        return {"status": "ok"}

    return app


def _notice_handler(
    status_code: int,
) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        notice = getattr(exc, "notice", None) or str(exc)
        return JSONResponse(status_code=status_code, content={"detail": str(notice)})

    return handler


def _serialize_day(day: DayRecord) -> dict[str, object]:
    return {
        "date": format_date_key(day.day),
        "status": day.status.value,
        "meal_name": day.meal_name,
        "reason": day.reason,
        "team": day.team.value if day.team else None,
        "team_name": TEAM_NAMES[day.team] if day.team else None,
        "recorded_by": day.recorded_by,
        "recorded_at": day.recorded_at,
        "is_holiday": day.is_holiday,
        "holiday_name": day.holiday_name,
    }


def _serialize_period(stats: PeriodStats) -> dict[str, int]:
    return asdict(stats)


def _serialize_teams(teams: dict[Team, PeriodStats]) -> dict[str, dict[str, int]]:
    return {team.value: _serialize_period(stats) for team, stats in teams.items()}


def _serialize_overview(overview: StatsOverview) -> dict[str, object]:
    return {
        "today": format_date_key(overview.today),
        "week": _serialize_period(overview.week),
        "month": _serialize_period(overview.month),
        "year": _serialize_period(overview.year),
        "teams": {
            period: _serialize_teams(teams) for period, teams in overview.teams.items()
        },
        "team_names": {team.value: name for team, name in TEAM_NAMES.items()},
        "streaks": asdict(overview.streaks),
        "history_years": overview.history_years,
        "notice": overview.notice,
    }


def _serialize_month(month: MonthHistory) -> dict[str, object]:
    return {
        "month": month.month,
        "name": month.name,
        "teams": {team.value: asdict(tally) for team, tally in month.teams.items()},
        "total": _serialize_period(month.total),
        "days_in_month": month.days_in_month,
    }


def _serialize_holiday(holiday: Holiday) -> dict[str, object]:
    return {
        "id": str(holiday.id),
        "date": format_date_key(holiday.day),
        "name": holiday.name,
        "description": holiday.description,
        "created_by": str(holiday.created_by) if holiday.created_by else None,
    }
