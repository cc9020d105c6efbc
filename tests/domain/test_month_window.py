"""Tests for month-key / day-key resolution (payroll_kernel.domain.month_window)."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from payroll_kernel.domain.month_window import (
    date_key_for,
    month_bounds,
    month_key_for,
    month_timestamp_bounds,
    parse_date_key,
    parse_month_key,
)
from payroll_kernel.exceptions import InvalidDateKeyError, InvalidMonthKeyError


class TestParseMonthKey:

    def test_valid_key(self):
        assert parse_month_key("2024-02") == (2024, 2)

    @pytest.mark.parametrize(
        "bad",
        ["2024-13", "2024-00", "2024-2", "24-02", "2024/02", "2024-02-01", "", "abcd-ef", " 2024-02", "2024-02\n"],
    )
    def test_rejects_malformed(self, bad):
        with pytest.raises(InvalidMonthKeyError) as exc_info:
            parse_month_key(bad)
        assert exc_info.value.month_key == bad
        assert exc_info.value.code == "INVALID_MONTH_KEY"

    def test_rejects_non_string(self):
        with pytest.raises(InvalidMonthKeyError):
            parse_month_key(202402)  # type: ignore[arg-type]

    @pytest.mark.parametrize("key", ["0000-01", "9999-01", "9999-12"])
    def test_rejects_years_without_a_following_month(self, key):
        with pytest.raises(InvalidMonthKeyError):
            parse_month_key(key)
        with pytest.raises(InvalidMonthKeyError):
            month_bounds(key)
        with pytest.raises(InvalidMonthKeyError):
            month_timestamp_bounds(key)

    def test_last_accepted_month(self):
        assert month_bounds("9998-12").end_date == "9998-12-31"
        assert month_timestamp_bounds("9998-12").end == datetime(9999, 1, 1, tzinfo=UTC)


class TestParseDateKey:

    def test_valid_key(self):
        assert parse_date_key("2024-02-29").day == 29

    @pytest.mark.parametrize("bad", ["2023-02-29", "2024-04-31", "2024-1-01", "2024-01-1", "yesterday"])
    def test_rejects_malformed(self, bad):
        with pytest.raises(InvalidDateKeyError) as exc_info:
            parse_date_key(bad)
        assert exc_info.value.code == "INVALID_DATE_KEY"


class TestMonthBounds:

    def test_leap_february(self):
        window = month_bounds("2024-02")
        assert window.start_date == "2024-02-01"
        assert window.end_date.endswith("-29")

    def test_common_february(self):
        assert month_bounds("2023-02").end_date.endswith("-28")

    @pytest.mark.parametrize(
        "month_key,last",
        [("2024-01", "2024-01-31"), ("2024-04", "2024-04-30"), ("2024-12", "2024-12-31"), ("1900-02", "1900-02-28"), ("2000-02", "2000-02-29")],
    )
    def test_last_day(self, month_key, last):
        assert month_bounds(month_key).end_date == last

    def test_day_keys_compare_lexicographically(self):
        window = month_bounds("2024-02")
        assert window.contains("2024-02-01")
        assert window.contains("2024-02-29")
        assert not window.contains("2024-01-31")
        assert not window.contains("2024-03-01")

    def test_invalid_month(self):
        with pytest.raises(InvalidMonthKeyError):
            month_bounds("2024-13")


class TestMonthTimestampBounds:

    def test_bounds_are_utc(self):
        window = month_timestamp_bounds("2024-02")
        assert window.start == datetime(2024, 2, 1, tzinfo=UTC)
        assert window.end == datetime(2024, 3, 1, tzinfo=UTC)

    def test_end_is_exclusive(self):
        window = month_timestamp_bounds("2024-02")
        assert window.contains(datetime(2024, 2, 29, 23, 59, 59, 999000, tzinfo=UTC))
        assert window.contains(datetime(2024, 2, 29, 23, 59, 59, 999500, tzinfo=UTC))
        assert window.contains(datetime(2024, 2, 29, 23, 59, 59, 999999, tzinfo=UTC))
        assert not window.contains(datetime(2024, 3, 1, tzinfo=UTC))

    def test_consecutive_months_share_the_boundary(self):
        january = month_timestamp_bounds("2024-01")
        february = month_timestamp_bounds("2024-02")
        assert january.end == february.start
        last_instant = datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=UTC)
        assert january.contains(last_instant)
        assert not february.contains(last_instant)

    def test_offset_timestamps_are_normalized(self):
        window = month_timestamp_bounds("2024-03")
        # 2024-03-01 01:00 at +02:00 is still February in UTC
        plus_two = timezone(timedelta(hours=2))
        assert not window.contains(datetime(2024, 3, 1, 1, 0, tzinfo=plus_two))

    def test_december_rolls_into_next_year(self):
        window = month_timestamp_bounds("2023-12")
        assert window.end == datetime(2024, 1, 1, tzinfo=UTC)


class TestKeysFromTimestamps:

    def test_date_key_uses_utc_day(self):
        minus_five = timezone(timedelta(hours=-5))
        assert date_key_for(datetime(2024, 2, 29, 22, 0, tzinfo=minus_five)) == "2024-03-01"

    def test_naive_timestamps_are_treated_as_utc(self):
        assert date_key_for(datetime(2024, 2, 29, 23, 0)) == "2024-02-29"

    def test_month_key(self):
        assert month_key_for(datetime(2024, 2, 29, 23, 0, tzinfo=UTC)) == "2024-02"

    def test_month_key_pads_early_years(self):
        assert month_key_for(datetime(999, 7, 1, tzinfo=UTC)) == "0999-07"
        assert month_bounds("0999-07").end_date == "0999-07-31"
