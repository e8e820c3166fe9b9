"""Tests for the month view builder."""

from datetime import date

from habitgrid.engine.days import day_index, month_bounds, month_grid
from habitgrid.engine.month_view import build_month_view
from habitgrid.models.schedule import DailySchedule, MonthlySchedule, WeeklySchedule


class TestBuildMonthView:
    """Test per-day due/done aggregation over the month grid."""

    def test_one_entry_per_grid_day(self, make_tracked):
        tracked = make_tracked(DailySchedule(effective_from=0))
        view = build_month_view(2024, 2, [tracked], set())

        assert [d.day for d in view] == month_grid(2024, 2)
        assert all(d.due_count == 1 for d in view)

    def test_counts_and_all_done(self, make_tracked):
        first, _ = month_bounds(2024, 3)
        daily = make_tracked(DailySchedule(effective_from=first), task_id=1, title="Walk")
        mondays = make_tracked(WeeklySchedule(effective_from=first, weekday_mask=1), task_id=2, title="Plan")
        monday = day_index(date(2024, 3, 4))
        keys = {(1, first), (1, monday), (2, monday)}

        by_day = {d.day: d for d in build_month_view(2024, 3, [mondays, daily], keys)}

        assert by_day[first].due_count == 1
        assert by_day[first].done_count == 1
        assert by_day[first].all_done is True

        assert by_day[monday].due_count == 2
        assert [t.id for t in by_day[monday].tasks] == [1, 2]
        assert by_day[monday].all_done is True

        tuesday = monday + 1
        assert by_day[tuesday].due_count == 1
        assert by_day[tuesday].done_count == 0
        assert by_day[tuesday].all_done is False
        assert by_day[tuesday].tasks[0].title == "Walk"

    def test_day_with_nothing_due_is_not_all_done(self, make_tracked):
        tracked = make_tracked(DailySchedule(effective_from=day_index(date(2030, 1, 1))))
        view = build_month_view(2024, 2, [tracked], set())

        assert all(d.due_count == 0 and d.all_done is False and d.tasks == [] for d in view)

    def test_monthday_missing_from_short_month(self, make_tracked):
        """A stored monthday of 30 is never due in February but shows in adjacent cells."""
        schedule = MonthlySchedule.model_construct(effective_from=day_index(date(2024, 1, 1)), monthday=30)
        tracked = make_tracked(schedule)
        first, last = month_bounds(2024, 2)

        view = build_month_view(2024, 2, [tracked], set())

        in_month = [d for d in view if first <= d.day <= last]
        assert len(in_month) == 29
        assert all(d.due_count == 0 for d in in_month)
        jan_30 = next(d for d in view if d.day == day_index(date(2024, 1, 30)))
        assert jan_30.due_count == 1

    def test_archived_task_shows_until_archive_day(self, make_tracked):
        archive_day = day_index(date(2024, 2, 10))
        archived = make_tracked(DailySchedule(effective_from=0, effective_to=archive_day), is_active=False)
        view = build_month_view(2024, 2, [archived], set())

        assert all(d.due_count == 1 for d in view if d.day <= archive_day)
        assert all(d.due_count == 0 for d in view if d.day > archive_day)

    def test_earlier_days_use_earlier_version(self, make_tracked):
        """Daily until the 14th, then Mondays only."""
        first, _ = month_bounds(2024, 3)
        switch = day_index(date(2024, 3, 15))
        tracked = make_tracked(
            DailySchedule(effective_from=first, effective_to=switch - 1),
            WeeklySchedule(effective_from=switch, weekday_mask=1),
        )
        by_day = {d.day: d for d in build_month_view(2024, 3, [tracked], set())}

        assert by_day[day_index(date(2024, 3, 14))].due_count == 1
        assert by_day[day_index(date(2024, 3, 16))].due_count == 0
        assert by_day[day_index(date(2024, 3, 18))].due_count == 1
