"""
Cohort Session Date Generator

Turns a cohort's start and end dates into numbered class dates.

Rules:
- Start and end are inclusive
- Sundays are never class days
- At most 3 sessions per Monday-anchored week, taken in encounter order
  (a week entered on Thursday yields Thu/Fri/Sat)
- Sessions are numbered sequentially from 1
"""

from datetime import date, datetime, timedelta
from typing import NamedTuple

SESSIONS_PER_WEEK = 3

_SUNDAY = 6  # date.weekday()


class InvalidDateRangeError(ValueError):
    """Raised when cohort dates are missing, unparseable, or out of order."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class SessionDate(NamedTuple):
    date: date
    session_number: int


def _coerce_date(value: date | datetime | str | None, label: str) -> date:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidDateRangeError("Start date and end date are required")

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass

    raise InvalidDateRangeError(f"Invalid date format for {label}: {value!r}")


def validate_cohort_dates(
    start_date: date | datetime | str | None,
    end_date: date | datetime | str | None,
) -> tuple[date, date]:
    """
    Validate and normalize a cohort date range.

    Returns:
        (start, end) as dates

    Raises:
        InvalidDateRangeError: Missing or unparseable dates, or start after end
    """
    start = _coerce_date(start_date, "start date")
    end = _coerce_date(end_date, "end date")

    if start > end:
        raise InvalidDateRangeError("Start date must be before end date")

    return start, end


def generate_cohort_sessions(
    start_date: date | datetime | str | None,
    end_date: date | datetime | str | None,
) -> list[SessionDate]:
    """
    Generate the class dates for a cohort.

    Raises:
        InvalidDateRangeError: If the range is invalid (nothing is generated)

    Example:
        >>> generate_cohort_sessions(date(2024, 1, 1), date(2024, 1, 7))
        [SessionDate(date=datetime.date(2024, 1, 1), session_number=1),
         SessionDate(date=datetime.date(2024, 1, 2), session_number=2),
         SessionDate(date=datetime.date(2024, 1, 3), session_number=3)]
    """
    start, end = validate_cohort_dates(start_date, end_date)

    sessions: list[SessionDate] = []
    current_week_start: date | None = None
    sessions_this_week = 0

    day = start
    while day <= end:
        weekday = day.weekday()
        if weekday != _SUNDAY:
            week_start = day - timedelta(days=weekday)
            if week_start != current_week_start:
                current_week_start = week_start
                sessions_this_week = 0

            if sessions_this_week < SESSIONS_PER_WEEK:
                sessions.append(SessionDate(date=day, session_number=len(sessions) + 1))
                sessions_this_week += 1

        day += timedelta(days=1)

    return sessions
