"""Pure domain layer: clock, month windows and DTOs (zero I/O)."""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.month_window import (
    DayWindow,
    TimestampWindow,
    date_key_for,
    month_bounds,
    month_key_for,
    month_timestamp_bounds,
    parse_date_key,
    parse_month_key,
)

__all__ = [
    "Clock",
    "DayWindow",
    "DeterministicClock",
    "SystemClock",
    "TimestampWindow",
    "date_key_for",
    "month_bounds",
    "month_key_for",
    "month_timestamp_bounds",
    "parse_date_key",
    "parse_month_key",
]
