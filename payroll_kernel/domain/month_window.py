"""
Month window resolution -- month keys to day-key and timestamp bounds.

Responsibility:
    Converts a ``YYYY-MM`` month key into the inclusive day-key window used
    to select order submissions and attendance, and into the half-open
    absolute UTC timestamp window used to select deductions by
    ``created_at``.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - All arithmetic is in UTC, so both windows describe the same calendar
      month regardless of the server timezone.
    - The last day is "day 0 of the next month", which handles 28/29/30/31
      day months and leap years without a lookup table.
    - Timestamp windows of consecutive months tile the time line: every
      instant, at any sub-second precision, belongs to exactly one month.

Failure modes:
    - InvalidMonthKeyError for anything but ``YYYY-MM`` with month 1..12
      and year 1..9998.
    - InvalidDateKeyError for anything but a real ``YYYY-MM-DD`` day.

Note:
    Orders are windowed by calendar ``date_key`` while deductions are
    windowed by their UTC ``created_at``.  A deduction entered late on the
    last day in a timezone ahead of UTC lands in the following month.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import MAXYEAR, UTC, date, datetime, time, timedelta

from payroll_kernel.exceptions import InvalidDateKeyError, InvalidMonthKeyError

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DATE_KEY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# The month after the last accepted one must still be a representable date
MAX_MONTH_KEY_YEAR = MAXYEAR - 1


@dataclass(frozen=True)
class DayWindow:
    """Inclusive day-key bounds of a month."""

    start_date: str
    end_date: str

    def contains(self, date_key: str) -> bool:
        return self.start_date <= date_key <= self.end_date


@dataclass(frozen=True)
class TimestampWindow:
    """Half-open absolute UTC bounds of a month: ``start <= t < end``."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= _as_utc(moment) < self.end


def parse_month_key(month_key: str) -> tuple[int, int]:
    """Return ``(year, month)`` for a valid month key."""
    if not isinstance(month_key, str):
        raise InvalidMonthKeyError(month_key)
    match = _MONTH_KEY_RE.fullmatch(month_key)
    if match is None:
        raise InvalidMonthKeyError(month_key)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= year <= MAX_MONTH_KEY_YEAR or not 1 <= month <= 12:
        raise InvalidMonthKeyError(month_key)
    return year, month


def parse_date_key(date_key: str) -> date:
    """Return the calendar day for a valid ``YYYY-MM-DD`` key."""
    if not isinstance(date_key, str) or _DATE_KEY_RE.fullmatch(date_key) is None:
        raise InvalidDateKeyError(date_key)
    try:
        return date.fromisoformat(date_key)
    except ValueError as exc:
        raise InvalidDateKeyError(date_key) from exc


def _first_days(month_key: str) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    year, month = parse_month_key(month_key)
    first = date(year, month, 1)
    if month == 12:
        return first, date(year + 1, 1, 1)
    return first, date(year, month + 1, 1)


def month_bounds(month_key: str) -> DayWindow:
    """Day-key bounds: the 1st through the last calendar day of the month."""
    first, next_first = _first_days(month_key)
    # Day 0 of the next month
    last = next_first - timedelta(days=1)
    return DayWindow(start_date=first.isoformat(), end_date=last.isoformat())


def month_timestamp_bounds(month_key: str) -> TimestampWindow:
    """UTC bounds: the first instant of the month up to, not including, the next."""
    first, next_first = _first_days(month_key)
    return TimestampWindow(
        start=datetime.combine(first, time.min, tzinfo=UTC),
        end=datetime.combine(next_first, time.min, tzinfo=UTC),
    )


def date_key_for(moment: datetime) -> str:
    """UTC calendar day of ``moment`` as a day key."""
    return _as_utc(moment).date().isoformat()


def month_key_for(moment: datetime) -> str:
    """UTC calendar month of ``moment`` as a month key."""
    moment = _as_utc(moment)
    return f"{moment.year:04d}-{moment.month:02d}"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
