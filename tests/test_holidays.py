"""Tests for holiday management."""

from datetime import date
from uuid import uuid4

import pytest

from kaja_tracker.messages import Notice
from kaja_tracker.services.holidays import (
    HolidayLoadError,
    HolidayService,
    HolidayValidationError,
    HolidayWriteError,
)
from tests.conftest import InMemoryHolidayRepository, make_holiday


def test_add_holiday_requires_date_and_name() -> None:
    repository = InMemoryHolidayRepository()
    service = HolidayService(repository)

    with pytest.raises(HolidayValidationError) as excinfo:
        service.add_holiday(date(2026, 3, 15), "   ", None, uuid4())
    with pytest.raises(HolidayValidationError):
        service.add_holiday(None, "Nemzeti ünnep", None, uuid4())

    assert excinfo.value.notice == Notice.HOLIDAY_MISSING_FIELDS
    assert repository.holidays == {}


def test_add_holiday_stores_and_notifies() -> None:
    changes: list[tuple[date, str | None]] = []
    repository = InMemoryHolidayRepository()
    service = HolidayService(
        repository, on_change=lambda day, name: changes.append((day, name))
    )
    admin_id = uuid4()

    holiday = service.add_holiday(date(2026, 3, 15), " Nemzeti ünnep ", "  ", admin_id)

    assert holiday.name == "Nemzeti ünnep"
    assert holiday.description is None
    assert holiday.created_by == admin_id
    assert changes == [(date(2026, 3, 15), "Nemzeti ünnep")]
    assert service.list_holidays() == [holiday]


def test_list_holidays_is_ordered_by_date() -> None:
    repository = InMemoryHolidayRepository()
    later = repository.add(make_holiday(date(2026, 5, 1), name="Munka ünnepe"))
    earlier = repository.add(make_holiday(date(2026, 3, 15)))

    assert HolidayService(repository).list_holidays() == [earlier, later]


def test_delete_holiday_clears_overlay() -> None:
    changes: list[tuple[date, str | None]] = []
    repository = InMemoryHolidayRepository()
    holiday = repository.add(make_holiday(date(2026, 3, 15)))
    service = HolidayService(
        repository, on_change=lambda day, name: changes.append((day, name))
    )

    removed = service.delete_holiday(holiday.id)

    assert removed == holiday
    assert repository.holidays == {}
    assert changes == [(date(2026, 3, 15), None)]


def test_delete_keeps_overlay_of_remaining_holiday_on_same_date() -> None:
    changes: list[tuple[date, str | None]] = []
    repository = InMemoryHolidayRepository()
    first = repository.add(make_holiday(date(2026, 3, 15)))
    repository.add(make_holiday(date(2026, 3, 15), name="Városi ünnep"))
    service = HolidayService(
        repository, on_change=lambda day, name: changes.append((day, name))
    )

    service.delete_holiday(first.id)

    assert changes == [(date(2026, 3, 15), "Városi ünnep")]


def test_delete_missing_holiday_returns_none() -> None:
    changes: list[tuple[date, str | None]] = []
    service = HolidayService(
        InMemoryHolidayRepository(),
        on_change=lambda day, name: changes.append((day, name)),
    )

    assert service.delete_holiday(uuid4()) is None
    assert changes == []


def test_repository_failures_raise_notices() -> None:
    service = HolidayService(InMemoryHolidayRepository(fail=True))

    with pytest.raises(HolidayWriteError) as add_error:
        service.add_holiday(date(2026, 3, 15), "Nemzeti ünnep", None, uuid4())
    with pytest.raises(HolidayWriteError) as delete_error:
        service.delete_holiday(uuid4())
    with pytest.raises(HolidayLoadError):
        service.list_holidays()

    assert add_error.value.notice == Notice.HOLIDAY_ADD_FAILED
    assert delete_error.value.notice == Notice.HOLIDAY_DELETE_FAILED
