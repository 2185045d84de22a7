"""
Date service for parsing, normalizing and labelling event dates.

All comparisons happen in the configured site timezone. Event dates are
stored as canonical local strings (YYYY-MM-DD HH:MM:SS) so that they sort
lexically and their first ten characters are the calendar day.
"""

import re
from datetime import datetime, timedelta
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo

from eventsync.config.settings import AppSettings
from eventsync.services.exceptions import InvalidDateFormatError


ISO_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

DateLike = Union[str, datetime]


class DateService:
    """
    Service for date handling in the site timezone.

    Usage:
        >>> dates = DateService(timezone="Europe/Berlin")
        >>> dates.normalize("2025-03-01T18:00")
        '2025-03-01 18:00:00'
        >>> dates.duration_minutes("1:30")
        90
    """

    def __init__(
        self,
        timezone: str = "UTC",
        date_format: str = "%d %B %Y",
        time_format: str = "%H:%M",
        relative_date_format: str = ", %d. %B %Y",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize date service.

        Args:
            timezone: IANA timezone identifier used for every comparison
            date_format: strftime format for absolute dates
            time_format: strftime format for times
            relative_date_format: strftime suffix appended to relative labels
            clock: Optional callable returning "now" (used by tests)
        """
        self.tz = ZoneInfo(timezone)
        self.date_format = date_format
        self.time_format = time_format
        self.relative_date_format = relative_date_format
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "DateService":
        """Build a date service from application settings."""
        return cls(
            timezone=settings.timezone,
            date_format=settings.date_format,
            time_format=settings.time_format,
            relative_date_format=settings.relative_date_format,
            clock=clock,
        )

    def now(self) -> datetime:
        """Current time as an aware datetime in the site timezone."""
        if self._clock is not None:
            return self._localize(self._clock())
        return datetime.now(self.tz)

    def now_iso(self) -> str:
        """Current time in canonical format."""
        return self.now().strftime(ISO_DATE_FORMAT)

    def is_valid_date_format(
        self,
        date_string: str,
        expected_format: str = ISO_DATE_FORMAT,
    ) -> bool:
        """
        Check that a string is exactly in the expected format.

        The string must parse and format back to itself, which rejects
        values like "2025-3-1 8:00:00".
        """
        if not isinstance(date_string, str):
            return False
        try:
            parsed = datetime.strptime(date_string, expected_format)
        except ValueError:
            return False
        return parsed.strftime(expected_format) == date_string

    def parse(self, value: DateLike) -> datetime:
        """
        Parse a date string or datetime into an aware datetime in the site timezone.

        Naive input is interpreted as local time; aware input is converted.

        Raises:
            InvalidDateFormatError: If the value cannot be parsed
        """
        if isinstance(value, datetime):
            return self._localize(value)

        if not isinstance(value, str) or not value.strip():
            raise InvalidDateFormatError(value)

        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidDateFormatError(value)

        return self._localize(parsed)

    def normalize(self, value: DateLike) -> str:
        """
        Normalize a date-time to the canonical YYYY-MM-DD HH:MM:SS local string.

        Raises:
            InvalidDateFormatError: If the value does not parse or does not
                round-trip to the canonical pattern
        """
        normalized = self.parse(value).strftime(ISO_DATE_FORMAT)
        if not self.is_valid_date_format(normalized):
            raise InvalidDateFormatError(value)
        return normalized

    def is_same_day(self, date1: DateLike, date2: Optional[DateLike] = None) -> bool:
        """Check if two dates fall on the same calendar day in the site timezone."""
        if date2 is None:
            return False
        return self.parse(date1).date() == self.parse(date2).date()

    def relative_label(
        self,
        date: DateLike,
        today: Optional[DateLike] = None,
    ) -> Optional[str]:
        """
        Label a date relative to today.

        Returns:
            "Today", "Yesterday", "Tomorrow" or None for any other day
        """
        day = self.parse(date).date()
        reference = self.parse(today).date() if today is not None else self.now().date()

        if day == reference:
            return "Today"
        if day == reference - timedelta(days=1):
            return "Yesterday"
        if day == reference + timedelta(days=1):
            return "Tomorrow"
        return None

    def format_day_relative_to_today(
        self,
        date: DateLike,
        today: Optional[DateLike] = None,
    ) -> str:
        """
        Format a day for a calendar bucket title.

        Relative days render as e.g. "Today, 01. March 2025"; any other day
        renders in the absolute date format.
        """
        parsed = self.parse(date)
        label = self.relative_label(parsed, today)
        if label:
            return label + parsed.strftime(self.relative_date_format)
        return parsed.strftime(self.date_format)

    def format_for_display(self, value: DateLike, include_time: bool = False) -> str:
        """Format a date (optionally with time) for display."""
        fmt = f"{self.date_format} {self.time_format}" if include_time else self.date_format
        return self.parse(value).strftime(fmt)

    def format_date_and_time(self, value: DateLike) -> str:
        """Format as "<date>, <time>", skipping empty formats."""
        parsed = self.parse(value)
        formats = [f for f in (self.date_format, self.time_format) if f.strip()]
        return ", ".join(parsed.strftime(f) for f in formats)

    def duration_minutes(self, duration: Optional[str]) -> int:
        """
        Convert a duration in the shape of H:MM to minutes.

        Returns 0 for empty or malformed input; never raises.
        """
        if not duration or not isinstance(duration, str) or ":" not in duration:
            return 0

        parts = duration.split(":")
        hours = self._absint(parts[0])
        minutes = self._absint(parts[1])
        return hours * 60 + minutes

    def duration_label(self, duration: Optional[str]) -> Optional[str]:
        """Return e.g. "90 Minutes", or None when there is no duration."""
        minutes = self.duration_minutes(duration)
        if not minutes:
            return None
        return f"{minutes} Minutes"

    def _localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value.astimezone(self.tz)

    @staticmethod
    def _absint(value: str) -> int:
        match = _LEADING_INT.match(value)
        if not match:
            return 0
        return abs(int(match.group()))
