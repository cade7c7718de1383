"""Tests for the deadline / duration helpers."""
from datetime import date, datetime, timedelta

from tools.deadline import add_weeks, clamp_weeks, compute_safe_deadline, parse_date

TODAY = date(2026, 1, 15)


class TestClampWeeks:

    def test_clamps_into_range(self):
        assert clamp_weeks(1) == 4
        assert clamp_weeks(8) == 8
        assert clamp_weeks(100) == 52
        assert clamp_weeks("12") == 12

    def test_non_numeric_is_none(self):
        for value in [None, "soon", float("nan"), float("inf"), True]:
            assert clamp_weeks(value) is None, value


class TestComputeSafeDeadline:

    def test_defaults_to_four_weeks(self):
        assert compute_safe_deadline(today=TODAY) == TODAY + timedelta(days=28)

    def test_uses_clamped_weeks(self):
        assert compute_safe_deadline(provided_weeks=10, today=TODAY) == add_weeks(TODAY, 10)
        assert compute_safe_deadline(provided_weeks=2, today=TODAY) == add_weeks(TODAY, 4)
        assert compute_safe_deadline(provided_weeks=80, today=TODAY) == add_weeks(TODAY, 52)

    def test_invalid_weeks_fall_back_to_four(self):
        assert compute_safe_deadline(provided_weeks="abc", today=TODAY) == add_weeks(TODAY, 4)
        assert compute_safe_deadline(provided_weeks=float("nan"), today=TODAY) == add_weeks(TODAY, 4)

    def test_bounds_hold_for_any_weeks(self):
        """Without an explicit date the deadline is always 28..364 days out."""
        for weeks in [-10, 0, 1, 3, 4, 5, 26, 52, 53, 1000, None, "x", float("nan"), 7.9]:
            deadline = compute_safe_deadline(provided_weeks=weeks, today=TODAY)
            assert TODAY + timedelta(days=28) <= deadline <= TODAY + timedelta(days=364), weeks

    def test_explicit_deadline_wins_without_clamp(self):
        """A valid date is returned as-is, even if it is only days away."""
        assert compute_safe_deadline("2026-01-20", provided_weeks=10, today=TODAY) == date(2026, 1, 20)
        assert compute_safe_deadline("2030-06-01T00:00:00Z", today=TODAY) == date(2030, 6, 1)

    def test_invalid_deadline_falls_back(self):
        assert compute_safe_deadline("next month", provided_weeks=6, today=TODAY) == add_weeks(TODAY, 6)
        assert compute_safe_deadline("2026-13-45", today=TODAY) == add_weeks(TODAY, 4)


class TestParseDate:

    def test_accepts_dates_and_datetimes(self):
        assert parse_date("2026-03-01") == date(2026, 3, 1)
        assert parse_date(datetime(2026, 3, 1, 10, 30)) == date(2026, 3, 1)
        assert parse_date(date(2026, 3, 1)) == date(2026, 3, 1)

    def test_rejects_garbage(self):
        assert parse_date("") is None
        assert parse_date(None) is None
        assert parse_date("tomorrow") is None
