"""Tests for day-index arithmetic and month grids."""

import pytest
from datetime import date, datetime, timedelta, timezone

from habitgrid.engine.days import (
    DAY_MAX,
    DAY_MIN,
    EPOCH,
    check_day,
    date_from_day_index,
    day_index,
    day_of_month,
    month_bounds,
    month_grid,
    today_index,
    week_start,
    weekday,
)
from habitgrid.errors import ValidationError


class TestDayIndex:
    """Test conversion between dates and day indices."""

    def test_epoch_is_day_zero_and_a_monday(self):
        assert day_index(EPOCH) == 0
        assert EPOCH.weekday() == 0
        assert weekday(0) == 0

    def test_days_before_epoch_are_negative(self):
        """1970-01-01 was a Thursday."""
        assert day_index(date(1970, 1, 1)) == -4
        assert weekday(-4) == 3

    def test_weekday_matches_calendar(self):
        for offset in range(0, 400, 13):
            d = date(2024, 1, 1) + timedelta(days=offset)
            assert weekday(day_index(d)) == d.weekday()

    def test_round_trip_through_date(self):
        d = date(2024, 2, 29)
        assert date_from_day_index(day_index(d)) == d
        assert day_of_month(day_index(d)) == 29

    def test_aware_datetime_uses_utc_date(self):
        """23:30 at UTC-5 is already the next day in UTC."""
        local = datetime(2024, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert day_index(local) == day_index(date(2024, 3, 2))

    def test_naive_datetime_is_treated_as_utc(self):
        assert day_index(datetime(2024, 3, 1, 23, 30)) == day_index(date(2024, 3, 1))

    def test_today_index_with_explicit_now(self):
        assert today_index(datetime(2024, 3, 4, 12, 0)) == day_index(date(2024, 3, 4))


class TestWeeks:
    def test_week_start_of_sunday(self):
        sunday = day_index(date(2024, 3, 3))
        assert week_start(sunday) == day_index(date(2024, 2, 26))

    def test_week_start_of_monday_is_itself(self):
        monday = day_index(date(2024, 2, 26))
        assert week_start(monday) == monday

    def test_week_start_before_epoch(self):
        assert week_start(-4) == -7


class TestMonthGrid:
    """Test month bounds and the 6x7 month grid."""

    def test_month_bounds_leap_february(self):
        first, last = month_bounds(2024, 2)
        assert first == day_index(date(2024, 2, 1))
        assert last == day_index(date(2024, 2, 29))

    def test_month_bounds_rejects_invalid_month(self):
        with pytest.raises(ValidationError):
            month_bounds(2024, 13)
        with pytest.raises(ValidationError):
            month_bounds(2024, 0)

    def test_grid_starts_on_monday_before_first(self):
        """February 1st 2024 is a Thursday, so the grid starts on Jan 29."""
        grid = month_grid(2024, 2)
        assert len(grid) == 42
        assert grid[0] == day_index(date(2024, 1, 29))
        assert grid[-1] == day_index(date(2024, 3, 10))
        assert weekday(grid[0]) == 0

    def test_grid_starts_on_first_when_month_starts_monday(self):
        grid = month_grid(2021, 2)
        assert grid[0] == day_index(date(2021, 2, 1))
        assert len(grid) == 42

    def test_grid_is_contiguous_and_covers_month(self):
        for month in range(1, 13):
            grid = month_grid(2023, month)
            first, last = month_bounds(2023, month)
            assert grid == list(range(grid[0], grid[0] + 42))
            assert grid[0] <= first and last <= grid[-1]


class TestDayRange:
    """Day indices are bounded by the calendar's date range."""

    def test_bounds_match_date_range(self):
        assert date_from_day_index(DAY_MIN) == date.min
        assert date_from_day_index(DAY_MAX) == date.max
        assert check_day(0) == 0

    @pytest.mark.parametrize("day", [3_000_000, -3_000_000])
    def test_day_without_date_is_rejected(self, day):
        with pytest.raises(ValidationError):
            date_from_day_index(day)
        with pytest.raises(ValidationError):
            check_day(day)

    def test_grid_past_last_date_is_rejected(self):
        with pytest.raises(ValidationError):
            month_grid(9999, 12)

    def test_grid_of_first_month(self):
        """January 1st of year 1 is a Monday."""
        assert month_grid(1, 1)[0] == DAY_MIN
