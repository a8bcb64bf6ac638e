import time
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from dateutils import (
    covers,
    dates_in_range,
    days_count,
    is_within_booking_window,
    max_booking_date,
    month_bounds,
    ranges_overlap,
    to_civil_date,
    today,
)


def test_dates_in_range_is_inclusive_and_ascending():
    days = dates_in_range(date(2025, 1, 30), date(2025, 2, 2))
    assert days == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]


def test_dates_in_range_across_year_and_leap_day():
    days = dates_in_range(date(2023, 12, 31), date(2024, 1, 1))
    assert days == [date(2023, 12, 31), date(2024, 1, 1)]

    leap = dates_in_range(date(2024, 2, 28), date(2024, 3, 1))
    assert date(2024, 2, 29) in leap
    assert len(leap) == 3


def test_dates_in_range_single_day():
    assert dates_in_range(date(2025, 5, 5), date(2025, 5, 5)) == [date(2025, 5, 5)]


def test_dates_in_range_end_before_start_falls_back_to_start():
    assert dates_in_range(date(2025, 5, 5), date(2025, 5, 1)) == [date(2025, 5, 5)]


@pytest.mark.parametrize(
    "start,end",
    [
        (date(2025, 1, 1), date(2025, 1, 1)),
        (date(2025, 1, 1), date(2025, 1, 9)),
        (date(2024, 2, 25), date(2024, 3, 3)),
        (date(2025, 3, 1), date(2025, 2, 1)),
    ],
)
def test_days_count_matches_range_length(start, end):
    days = dates_in_range(start, end)
    assert days_count(start, end) == len(days)
    assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))


def test_covers_is_inclusive_and_handles_single_day():
    assert covers(date(2025, 2, 8), date(2025, 2, 12), date(2025, 2, 8))
    assert covers(date(2025, 2, 8), date(2025, 2, 12), date(2025, 2, 12))
    assert not covers(date(2025, 2, 8), date(2025, 2, 12), date(2025, 2, 13))
    assert covers(date(2025, 2, 10), None, date(2025, 2, 10))
    assert not covers(date(2025, 2, 10), None, date(2025, 2, 11))


def test_ranges_sharing_a_boundary_day_overlap():
    assert ranges_overlap(date(2025, 1, 1), date(2025, 1, 5), date(2025, 1, 5), date(2025, 1, 9))
    assert not ranges_overlap(date(2025, 1, 1), date(2025, 1, 4), date(2025, 1, 5), date(2025, 1, 9))


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))
    with pytest.raises(ValueError):
        month_bounds(2025, 13)


def test_to_civil_date_parses_strings_and_passes_dates_through():
    assert to_civil_date("2025-03-05") == date(2025, 3, 5)
    assert to_civil_date(date(2025, 3, 5)) == date(2025, 3, 5)


def test_to_civil_date_converts_instants_into_booking_timezone():
    # 20:00 UTC is already the next day in Bangkok (UTC+7)
    instant = datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc)
    assert to_civil_date(instant) == date(2025, 1, 2)


def test_to_civil_date_rejects_naive_datetimes_and_garbage():
    with pytest.raises(ValueError):
        to_civil_date(datetime(2025, 1, 1, 12, 0))
    with pytest.raises(ValueError):
        to_civil_date("")
    with pytest.raises(ValueError):
        to_civil_date("2025-02-30")


def test_today_is_the_bangkok_civil_date():
    expected = datetime.now(ZoneInfo("Asia/Bangkok")).date()
    assert today() in (expected, expected + timedelta(days=1))


def test_booking_window_runs_to_end_of_next_year():
    current = date(2025, 1, 1)
    assert max_booking_date(current) == date(2026, 12, 31)
    assert is_within_booking_window(current, current)
    assert is_within_booking_window(date(2026, 12, 31), current)
    assert not is_within_booking_window(date(2024, 12, 31), current)
    assert not is_within_booking_window(date(2027, 1, 1), current)


def test_booking_window_defaults_to_today():
    assert is_within_booking_window(today())
    assert not is_within_booking_window(today() - timedelta(days=1))


def test_days_count_on_a_huge_range_is_arithmetic():
    started = time.perf_counter()
    assert days_count(date(2026, 10, 20), date(9999, 12, 31)) == 2912151
    assert time.perf_counter() - started < 1
