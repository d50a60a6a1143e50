"""
Unit tests for cohort session date generation.

These tests cover:
- Weekly cap of three sessions
- Sunday exclusion
- Numbering across weeks
- Partial first weeks
- Date parsing and validation errors
"""

from datetime import date, datetime, timedelta

import pytest

from academy.modules.cohorts.generator import (
    InvalidDateRangeError,
    SessionDate,
    generate_cohort_sessions,
    validate_cohort_dates,
)


class TestGenerateCohortSessions:
    """Tests for generate_cohort_sessions."""

    def test_single_week_takes_first_three_days(self):
        """Mon 2024-01-01 to Sun 2024-01-07 yields Mon, Tue, Wed."""
        sessions = generate_cohort_sessions(date(2024, 1, 1), date(2024, 1, 7))

        assert sessions == [
            SessionDate(date(2024, 1, 1), 1),
            SessionDate(date(2024, 1, 2), 2),
            SessionDate(date(2024, 1, 3), 3),
        ]

    def test_sunday_only_range_is_empty(self):
        """A range covering only a Sunday has no class days."""
        assert generate_cohort_sessions(date(2024, 1, 7), date(2024, 1, 7)) == []

    def test_single_day_range(self):
        """Start equal to end on a weekday yields one session."""
        assert generate_cohort_sessions("2024-01-03", "2024-01-03") == [
            SessionDate(date(2024, 1, 3), 1)
        ]

    def test_thursday_start_takes_rest_of_week(self):
        """A week entered on Thursday yields Thu, Fri, Sat."""
        sessions = generate_cohort_sessions(date(2024, 1, 4), date(2024, 1, 7))

        assert [s.date for s in sessions] == [
            date(2024, 1, 4),
            date(2024, 1, 5),
            date(2024, 1, 6),
        ]

    def test_saturday_start_then_new_week(self):
        """A Saturday start gives one session before the next Monday week."""
        sessions = generate_cohort_sessions(date(2024, 1, 6), date(2024, 1, 10))

        assert [s.date for s in sessions] == [
            date(2024, 1, 6),
            date(2024, 1, 8),
            date(2024, 1, 9),
            date(2024, 1, 10),
        ]
        assert [s.session_number for s in sessions] == [1, 2, 3, 4]

    def test_multi_week_numbering_is_sequential(self):
        """Four full weeks give 12 sessions numbered 1..12."""
        sessions = generate_cohort_sessions(date(2024, 1, 1), date(2024, 1, 28))

        assert len(sessions) == 12
        assert [s.session_number for s in sessions] == list(range(1, 13))
        assert all(s.date.weekday() in (0, 1, 2) for s in sessions)

    def test_never_more_than_three_per_week_and_no_sundays(self):
        """Over a long range every Monday week has at most three sessions."""
        start = date(2024, 2, 14)
        sessions = generate_cohort_sessions(start, start + timedelta(days=120))

        weeks: dict[date, int] = {}
        for session in sessions:
            assert session.date.weekday() != 6
            week = session.date - timedelta(days=session.date.weekday())
            weeks[week] = weeks.get(week, 0) + 1
        assert max(weeks.values()) <= 3

    def test_accepts_datetimes_and_iso_strings(self):
        """Datetimes and ISO strings are normalized to dates."""
        from_datetimes = generate_cohort_sessions(
            datetime(2024, 1, 1, 9, 30),
            datetime(2024, 1, 7, 18, 0),
        )
        from_strings = generate_cohort_sessions("2024-01-01T09:30:00", "2024-01-07")

        assert from_datetimes == from_strings
        assert len(from_strings) == 3


class TestValidateCohortDates:
    """Tests for date validation."""

    def test_start_after_end_raises(self):
        """Reversed ranges are rejected and nothing is generated."""
        with pytest.raises(InvalidDateRangeError) as exc_info:
            generate_cohort_sessions(date(2024, 2, 1), date(2024, 1, 1))

        assert exc_info.value.reason == "Start date must be before end date"

    @pytest.mark.parametrize(
        ("start", "end"),
        [(None, "2024-01-07"), ("2024-01-01", None), ("", "2024-01-07"), ("  ", "  ")],
    )
    def test_missing_dates_raise(self, start, end):
        """Missing dates are reported as required."""
        with pytest.raises(InvalidDateRangeError, match="required"):
            validate_cohort_dates(start, end)

    @pytest.mark.parametrize("bad", ["2024-13-01", "next monday", "01/02/2024"])
    def test_unparseable_dates_raise(self, bad):
        """Strings that aren't ISO dates are rejected."""
        with pytest.raises(InvalidDateRangeError, match="Invalid date format"):
            validate_cohort_dates(bad, "2024-12-31")

    def test_non_date_type_raises(self):
        """Values of other types are rejected."""
        with pytest.raises(InvalidDateRangeError):
            validate_cohort_dates(20240101, "2024-12-31")

    def test_error_is_value_error(self):
        """Callers catching ValueError also see range errors."""
        with pytest.raises(ValueError):
            validate_cohort_dates("2024-03-01", "2024-02-01")

    def test_returns_normalized_dates(self):
        """Valid input comes back as a (start, end) date tuple."""
        assert validate_cohort_dates("2024-01-01", datetime(2024, 1, 31, 12)) == (
            date(2024, 1, 1),
            date(2024, 1, 31),
        )
