"""Tests for month bucketing."""

import pytest
from datetime import date, datetime

from rentbook.periods import (
    current_month_key,
    is_month_key,
    month_bounds,
    month_key_of,
    month_label,
    next_month,
    parse_month_key,
    previous_month,
    shift_month,
)


class TestMonthKey:
    """Tests for month key derivation and parsing."""

    def test_month_key_of_date(self):
        """Test the key is zero-padded YYYY-MM."""
        assert month_key_of(date(2024, 3, 1)) == "2024-03"
        assert month_key_of(date(2024, 3, 31)) == "2024-03"

    def test_month_key_of_datetime(self):
        """Test datetimes bucket by their calendar month."""
        assert month_key_of(datetime(2024, 11, 30, 23, 59)) == "2024-11"

    def test_parse_month_key(self):
        """Test parsing returns (year, month)."""
        assert parse_month_key("2024-07") == (2024, 7)

    @pytest.mark.parametrize("key", ["2024-13", "2024-00", "2024-3", "24-03", "", "march"])
    def test_parse_rejects_malformed_keys(self, key):
        """Test malformed keys raise ValueError."""
        with pytest.raises(ValueError, match="Invalid month key"):
            parse_month_key(key)
        assert not is_month_key(key)

    def test_current_month_key(self):
        """Test the default month follows today's date."""
        assert current_month_key(date(2024, 5, 6)) == "2024-05"


class TestNavigation:
    """Tests for the month selector."""

    def test_next_month_wraps_year(self):
        """Test December moves to January of the next year."""
        assert next_month(month_key_of(date(2024, 12, 15))) == "2025-01"

    def test_previous_month_wraps_year(self):
        """Test January moves to December of the previous year."""
        assert previous_month("2024-01") == "2023-12"

    def test_shift_many_months(self):
        """Test multi-month shifts in both directions."""
        assert shift_month("2024-03", 14) == "2025-05"
        assert shift_month("2024-03", -15) == "2022-12"

    def test_label(self):
        """Test the long display label."""
        assert month_label("2024-03") == "March 2024"

    def test_bounds_leap_year(self):
        """Test February bounds in a leap year."""
        assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
