"""
Unit tests for DateService.

Tests normalization, relative day labels and duration parsing in the site
timezone (Europe/Berlin, "now" fixed at 2025-03-01 12:00).
"""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError as PydanticValidationError

from eventsync.config.settings import AppSettings
from eventsync.services.date_service import DateService, ISO_DATE_FORMAT
from eventsync.services.exceptions import InvalidDateFormatError, ValidationError


class TestNormalize:
    """Tests for canonical date-time normalization."""

    def test_normalize_canonical_input_unchanged(self, date_service):
        assert date_service.normalize("2025-03-01 18:00:00") == "2025-03-01 18:00:00"

    def test_normalize_iso_t_separator(self, date_service):
        assert date_service.normalize("2025-03-01T18:00") == "2025-03-01 18:00:00"

    def test_normalize_converts_aware_input_to_site_timezone(self, date_service):
        """17:00 UTC is 18:00 in Berlin (CET)."""
        assert date_service.normalize("2025-03-01T17:00:00+00:00") == "2025-03-01 18:00:00"

    def test_normalize_datetime_object(self, date_service):
        value = datetime(2025, 3, 1, 18, 0)
        assert date_service.normalize(value) == "2025-03-01 18:00:00"

    @pytest.mark.parametrize("value", ["not a date", "", "   ", "2025-13-45 10:00:00", None])
    def test_normalize_invalid_raises(self, date_service, value):
        with pytest.raises(InvalidDateFormatError):
            date_service.normalize(value)

    def test_invalid_date_is_a_validation_error(self, date_service):
        with pytest.raises(ValidationError) as exc_info:
            date_service.normalize("nope")
        assert "Invalid date format" in exc_info.value.message


class TestIsValidDateFormat:
    """Tests for strict format checks."""

    def test_canonical_format_is_valid(self, date_service):
        assert date_service.is_valid_date_format("2025-03-01 18:00:00") is True

    def test_unpadded_values_are_invalid(self, date_service):
        assert date_service.is_valid_date_format("2025-3-1 8:00:00") is False

    def test_other_format_is_invalid(self, date_service):
        assert date_service.is_valid_date_format("2025-03-01T18:00:00") is False

    def test_custom_format(self, date_service):
        assert date_service.is_valid_date_format("2025-03-01", "%Y-%m-%d") is True

    def test_non_string_is_invalid(self, date_service):
        assert date_service.is_valid_date_format(None) is False


class TestNow:
    """Tests for the injectable clock."""

    def test_now_uses_clock(self, date_service):
        assert date_service.now() == datetime(2025, 3, 1, 12, 0, tzinfo=ZoneInfo("Europe/Berlin"))

    def test_now_iso(self, date_service):
        assert date_service.now_iso() == "2025-03-01 12:00:00"

    def test_now_without_clock_is_aware(self):
        now = DateService(timezone="Europe/Berlin").now()
        assert now.tzinfo is not None
        assert DateService().is_valid_date_format(now.strftime(ISO_DATE_FORMAT))


class TestRelativeLabels:
    """Tests for Today/Yesterday/Tomorrow labels."""

    @pytest.mark.parametrize("value,expected", [
        ("2025-03-01 00:00:00", "Today"),
        ("2025-03-01 23:59:59", "Today"),
        ("2025-02-28 23:59:59", "Yesterday"),
        ("2025-03-02 00:00:00", "Tomorrow"),
        ("2025-03-03 10:00:00", None),
        ("2025-02-27 10:00:00", None),
    ])
    def test_relative_label(self, date_service, value, expected):
        assert date_service.relative_label(value) == expected

    def test_relative_label_with_explicit_today(self, date_service):
        assert date_service.relative_label("2025-06-11 09:00:00", today="2025-06-10") == "Tomorrow"

    def test_relative_label_compares_in_site_timezone(self, date_service):
        """23:30 UTC on Feb 28 is already March 1 in Berlin."""
        assert date_service.relative_label("2025-02-28T23:30:00+00:00") == "Today"

    def test_format_day_relative_today(self, date_service):
        assert date_service.format_day_relative_to_today("2025-03-01 18:00:00") == "Today, 01. March 2025"

    def test_format_day_relative_tomorrow(self, date_service):
        assert date_service.format_day_relative_to_today("2025-03-02 18:00:00") == "Tomorrow, 02. March 2025"

    def test_format_day_absolute(self, date_service):
        assert date_service.format_day_relative_to_today("2025-03-05 10:00:00") == "05 March 2025"

    def test_is_same_day(self, date_service):
        assert date_service.is_same_day("2025-03-01 01:00:00", "2025-03-01 23:00:00") is True
        assert date_service.is_same_day("2025-03-01 01:00:00", "2025-03-02 01:00:00") is False
        assert date_service.is_same_day("2025-03-01 01:00:00", None) is False


class TestFormatting:
    """Tests for display formatting."""

    def test_format_for_display(self, date_service):
        assert date_service.format_for_display("2025-03-01 18:00:00") == "01 March 2025"

    def test_format_for_display_with_time(self, date_service):
        assert date_service.format_for_display("2025-03-01 18:00:00", include_time=True) == "01 March 2025 18:00"

    def test_format_date_and_time(self, date_service):
        assert date_service.format_date_and_time("2025-03-01 18:00:00") == "01 March 2025, 18:00"

    def test_format_date_and_time_skips_empty_format(self):
        dates = DateService(time_format=" ")
        assert dates.format_date_and_time("2025-03-01 18:00:00") == "01 March 2025"


class TestDuration:
    """Tests for H:MM durations."""

    @pytest.mark.parametrize("value,expected", [
        ("1:30", 90),
        ("2:05", 125),
        ("0:45", 45),
        ("1:30:00", 90),
        ("x:15", 15),
        ("-1:30", 90),
        ("90", 0),
        ("", 0),
        (None, 0),
        ("abc", 0),
    ])
    def test_duration_minutes(self, date_service, value, expected):
        assert date_service.duration_minutes(value) == expected

    def test_duration_label(self, date_service):
        assert date_service.duration_label("1:30") == "90 Minutes"

    def test_duration_label_empty(self, date_service):
        assert date_service.duration_label("0:00") is None
        assert date_service.duration_label(None) is None


class TestFromSettings:
    """Tests for building the service from settings."""

    def test_from_settings(self):
        settings = AppSettings(timezone="America/New_York", date_format="%Y/%m/%d")
        dates = DateService.from_settings(settings)

        assert str(dates.tz) == "America/New_York"
        assert dates.format_for_display("2025-03-01 18:00:00") == "2025/03/01"

    def test_unknown_timezone_rejected_by_settings(self):
        with pytest.raises(PydanticValidationError):
            AppSettings(timezone="Mars/Olympus")
