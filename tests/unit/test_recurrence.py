"""
Unit tests for the recurrence calculator.

Tests cover:
- Fixed frequencies (daily through annually)
- Month-end clamping and leap years
- Custom intervals and their no-op fallbacks
"""

from datetime import datetime, timezone

import pytest

from maintrack_backend.core.recurrence import (
    FrequencyUnit,
    RecurrenceFrequency,
    add_calendar_days,
    calculate_next_due_date,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestFixedFrequencies:
    """Tests for the built-in frequencies."""

    def test_daily_adds_one_day(self):
        assert calculate_next_due_date(utc(2024, 1, 1), "daily") == utc(2024, 1, 2)

    def test_weekly_adds_seven_days(self):
        """2024-01-01 weekly is due 2024-01-08."""
        assert calculate_next_due_date(
            utc(2024, 1, 1), RecurrenceFrequency.WEEKLY
        ) == utc(2024, 1, 8)

    def test_monthly_keeps_day_of_month(self):
        assert calculate_next_due_date(utc(2024, 3, 15), "monthly") == utc(2024, 4, 15)

    def test_quarterly_adds_three_months(self):
        assert calculate_next_due_date(utc(2024, 1, 10), "quarterly") == utc(2024, 4, 10)

    def test_semi_annually_adds_six_months(self):
        assert calculate_next_due_date(
            utc(2024, 2, 20), "semi_annually"
        ) == utc(2024, 8, 20)

    def test_annually_adds_one_year(self):
        assert calculate_next_due_date(utc(2023, 6, 1), "annually") == utc(2024, 6, 1)

    def test_time_of_day_is_preserved(self):
        anchor = utc(2024, 1, 1, 9, 45)
        assert calculate_next_due_date(anchor, "daily") == utc(2024, 1, 2, 9, 45)


class TestMonthEndClamping:
    """Month arithmetic clamps to the last day of the target month."""

    def test_jan_31_leap_year_goes_to_feb_29(self):
        assert calculate_next_due_date(utc(2024, 1, 31), "monthly") == utc(2024, 2, 29)

    def test_jan_31_common_year_goes_to_feb_28(self):
        assert calculate_next_due_date(utc(2023, 1, 31), "monthly") == utc(2023, 2, 28)

    def test_never_rolls_into_march(self):
        result = calculate_next_due_date(utc(2023, 1, 31), "monthly")
        assert result.month == 2

    def test_quarterly_from_nov_30_clamps_to_feb(self):
        assert calculate_next_due_date(utc(2023, 11, 30), "quarterly") == utc(2024, 2, 29)

    def test_annually_from_leap_day(self):
        assert calculate_next_due_date(utc(2024, 2, 29), "annually") == utc(2025, 2, 28)


class TestCustomFrequency:
    """Tests for custom interval × unit recurrence."""

    @pytest.mark.parametrize(
        "interval,unit,expected",
        [
            (10, FrequencyUnit.DAYS, utc(2024, 1, 11)),
            (2, FrequencyUnit.WEEKS, utc(2024, 1, 15)),
            (2, FrequencyUnit.MONTHS, utc(2024, 3, 1)),
            (3, FrequencyUnit.YEARS, utc(2027, 1, 1)),
        ],
    )
    def test_custom_units(self, interval, unit, expected):
        assert calculate_next_due_date(utc(2024, 1, 1), "custom", interval, unit) == expected

    def test_custom_months_clamp_like_monthly(self):
        assert calculate_next_due_date(
            utc(2024, 1, 31), "custom", 1, "months"
        ) == utc(2024, 2, 29)

    def test_unit_accepts_plain_strings(self):
        assert calculate_next_due_date(utc(2024, 1, 1), "custom", 3, "days") == utc(2024, 1, 4)

    def test_missing_interval_returns_anchor(self):
        anchor = utc(2024, 5, 5)
        assert calculate_next_due_date(anchor, "custom", None, "days") == anchor

    def test_missing_unit_returns_anchor(self):
        anchor = utc(2024, 5, 5)
        assert calculate_next_due_date(anchor, "custom", 4, None) == anchor

    def test_non_positive_interval_returns_anchor(self):
        anchor = utc(2024, 5, 5)
        assert calculate_next_due_date(anchor, "custom", 0, "weeks") == anchor
        assert calculate_next_due_date(anchor, "custom", -2, "weeks") == anchor


class TestNeverBeforeAnchor:
    """The next due date is never earlier than the anchor."""

    @pytest.mark.parametrize("frequency", [f.value for f in RecurrenceFrequency])
    def test_result_not_before_anchor(self, frequency):
        anchor = utc(2024, 12, 31, 23, 59)
        assert calculate_next_due_date(anchor, frequency, 1, "days") >= anchor

    def test_unknown_frequency_is_rejected(self):
        with pytest.raises(ValueError):
            calculate_next_due_date(utc(2024, 1, 1), "fortnightly")


class TestAddCalendarDays:
    """Tests for warranty-style calendar-day arithmetic."""

    def test_adds_days_keeping_time(self):
        assert add_calendar_days(utc(2024, 2, 27, 14, 0), 3) == utc(2024, 3, 1, 14, 0)

    def test_zero_days_is_identity(self):
        anchor = utc(2024, 2, 27, 14, 0)
        assert add_calendar_days(anchor, 0) == anchor
