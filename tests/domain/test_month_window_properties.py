"""Property-based checks for month window resolution."""

import calendar
from datetime import UTC, date, datetime, timedelta

import pytest

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import given  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

from payroll_kernel.domain.month_window import (  # noqa: E402
    date_key_for,
    month_bounds,
    month_key_for,
    month_timestamp_bounds,
)

months = st.tuples(st.integers(min_value=1, max_value=9998), st.integers(min_value=1, max_value=12))


@given(months)
def test_day_window_covers_the_calendar_month(year_month):
    year, month = year_month
    window = month_bounds(f"{year:04d}-{month:02d}")
    last_day = calendar.monthrange(year, month)[1]
    assert window.start_date == date(year, month, 1).isoformat()
    assert window.end_date == date(year, month, last_day).isoformat()


@given(months)
def test_timestamp_window_ends_at_next_month(year_month):
    year, month = year_month
    month_key = f"{year:04d}-{month:02d}"
    window = month_timestamp_bounds(month_key)
    assert month_key_for(window.start) == month_key
    assert month_key_for(window.end - timedelta(microseconds=1)) == month_key
    assert month_key_for(window.end) != month_key


@given(st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1), timezones=st.just(UTC)))
def test_moment_falls_in_its_own_month(moment):
    month_key = month_key_for(moment)
    assert month_bounds(month_key).contains(date_key_for(moment))
    assert month_timestamp_bounds(month_key).start <= moment
    assert month_timestamp_bounds(month_key).contains(moment)


@given(st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1), timezones=st.just(UTC)))
def test_moment_belongs_to_exactly_one_timestamp_window(moment):
    month_key = month_key_for(moment)
    previous = month_key_for(month_timestamp_bounds(month_key).start - timedelta(microseconds=1))
    following = month_key_for(month_timestamp_bounds(month_key).end)
    assert not month_timestamp_bounds(previous).contains(moment)
    assert not month_timestamp_bounds(following).contains(moment)
