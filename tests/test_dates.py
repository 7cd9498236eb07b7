"""Tests for calendar date helpers."""

from datetime import date, datetime, timedelta

from kaja_tracker.dates import (
    DateRange,
    View,
    can_navigate_back,
    clamp_range,
    format_date_key,
    horizon_end,
    is_future_date,
    is_same_day,
    month_range,
    pad_range,
    parse_date_key,
    required_range,
    shift_month,
    week_range,
    week_start,
)

FLOOR = date(2026, 1, 1)


def test_week_start_treats_sunday_as_end_of_week() -> None:
    assert week_start(date(2026, 3, 22)) == date(2026, 3, 16)
    assert week_start(date(2026, 3, 16)) == date(2026, 3, 16)


def test_week_start_offsets_are_seven_days_apart() -> None:
    reference = date(2026, 2, 11)
    for offset in range(-6, 6):
        start = week_start(reference, offset)
        assert start.weekday() == 0
        assert week_start(reference, offset + 1) - start == timedelta(days=7)


def test_week_start_ignores_time_of_day() -> None:
    assert week_start(datetime(2026, 3, 18, 23, 59)) == date(2026, 3, 16)


def test_month_range_crosses_year_boundaries() -> None:
    assert shift_month(date(2026, 1, 31), -1) == date(2025, 12, 1)
    assert month_range(date(2026, 1, 15), 1) == DateRange(
        date(2026, 2, 1), date(2026, 2, 28)
    )
    assert month_range(date(2025, 12, 3), 2).end == date(2026, 2, 28)


def test_format_date_key_is_zero_padded_and_parses_back() -> None:
    day = date(2026, 3, 5)

    key = format_date_key(day)

    assert key == "2026-03-05"
    assert parse_date_key(key) == day
    assert format_date_key(datetime(2026, 3, 5, 23, 30)) == key
    assert parse_date_key("2026-03-05T10:00:00+00:00") == day


def test_future_and_same_day_predicates() -> None:
    today = date(2026, 3, 10)

    assert is_future_date(date(2026, 3, 15), today)
    assert not is_future_date(datetime(2026, 3, 10, 22, 0), today)
    assert not is_future_date(date(2026, 3, 9), today)
    assert is_same_day(datetime(2026, 3, 10, 8, 0), datetime(2026, 3, 10, 20, 0))
    assert not is_same_day(date(2026, 3, 10), date(2026, 3, 11))


def test_required_range_for_week_and_month() -> None:
    today = date(2026, 3, 18)

    assert required_range(View.WEEK, -1, today) == week_range(today, -1)
    assert required_range(View.WEEK, 0, today) == DateRange(
        date(2026, 3, 16), date(2026, 3, 22)
    )
    assert required_range(View.MONTH, -2, today) == DateRange(
        date(2026, 1, 1), date(2026, 1, 31)
    )


def test_required_range_is_clamped_to_floor() -> None:
    today = date(2026, 3, 18)

    assert required_range(View.WEEK, -11, today, FLOOR) == DateRange(
        FLOOR, date(2026, 1, 4)
    )
    assert required_range(View.MONTH, -4, today, FLOOR).is_empty
    assert required_range(View.MONTH, -2, today, FLOOR) == month_range(FLOOR)


def test_horizon_end_is_last_day_of_month_ahead() -> None:
    assert horizon_end(date(2026, 3, 18), 12) == date(2027, 3, 31)
    assert horizon_end(date(2026, 1, 31), 1) == date(2026, 2, 28)


def test_pad_range_widens_to_whole_months() -> None:
    padded = pad_range(DateRange(date(2026, 3, 16), date(2026, 3, 22)), 3)

    assert padded == DateRange(date(2025, 12, 1), date(2026, 6, 30))


def test_clamp_range_drops_dates_before_floor() -> None:
    clamped = clamp_range(DateRange(date(2025, 12, 1), date(2026, 1, 31)), FLOOR)

    assert clamped == DateRange(FLOOR, date(2026, 1, 31))
    assert clamp_range(DateRange(date(2025, 11, 1), date(2025, 11, 30)), FLOOR).is_empty


def test_date_range_days_are_inclusive() -> None:
    days = list(DateRange(date(2026, 2, 27), date(2026, 3, 2)).days())

    assert days == [
        date(2026, 2, 27),
        date(2026, 2, 28),
        date(2026, 3, 1),
        date(2026, 3, 2),
    ]


def test_can_navigate_back_stops_at_floor_week() -> None:
    today = date(2026, 1, 14)

    assert can_navigate_back(View.WEEK, 0, today, FLOOR)
    assert can_navigate_back(View.WEEK, -1, today, FLOOR)
    assert not can_navigate_back(View.WEEK, -2, today, FLOOR)


def test_can_navigate_back_stops_at_floor_month() -> None:
    today = date(2026, 3, 18)

    assert can_navigate_back(View.MONTH, -1, today, FLOOR)
    assert not can_navigate_back(View.MONTH, -2, today, FLOOR)
