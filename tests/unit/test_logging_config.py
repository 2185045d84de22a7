"""
Unit tests for the logging formatters and logger registry.
"""

import json
import logging

import pytest

from eventsync.utils.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    extra_fields,
    get_logger,
)


def make_record(**extra):
    record = logging.LogRecord(
        "eventsync.services", logging.INFO, __file__, 10, "Rebuilt recurrences", None, None
    )
    record.__dict__.update(extra)
    return record


class TestFormatters:
    """Tests for carrying extra context into log output."""

    def test_extra_fields(self):
        assert extra_fields(make_record(event_id=12)) == {"event_id": 12}
        assert extra_fields(make_record()) == {}

    def test_json_includes_extra(self):
        data = json.loads(JSONFormatter().format(make_record(event_id=12, recurrences_created=2)))

        assert data["message"] == "Rebuilt recurrences"
        assert data["level"] == "INFO"
        assert data["logger"] == "eventsync.services"
        assert data["event_id"] == 12
        assert data["recurrences_created"] == 2

    def test_console_appends_extra(self):
        line = ConsoleFormatter().format(make_record(event_id=12))

        assert line.endswith("Rebuilt recurrences (event_id=12)")

    def test_console_without_extra(self):
        assert ConsoleFormatter().format(make_record()).endswith("Rebuilt recurrences")


class TestGetLogger:
    """Tests for the named loggers."""

    @pytest.mark.parametrize("name", ["api", "services", "db"])
    def test_known_names(self, name):
        assert get_logger(name).name == f"eventsync.{name}"

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_logger("photos")

    def test_extra_is_captured(self, caplog):
        logger = get_logger("services")
        logger.propagate = True
        try:
            with caplog.at_level(logging.INFO, logger="eventsync.services"):
                logger.info("Pushed location to events", extra={"event_count": 3})
        finally:
            logger.propagate = False

        assert caplog.records[-1].event_count == 3
