"""
Unit tests for EventService read helpers.
"""

import pytest

from eventsync.services.event_service import EventService


@pytest.fixture
def events(saver, date_service):
    return EventService(
        saver.db,
        content_store=saver.content_store,
        field_store=saver.field_store,
        taxonomy_store=saver.taxonomy_store,
        date_service=date_service,
    )


class TestEventDates:
    """Tests for the date list of a series."""

    def test_dates_of_event_and_recurrences(self, saver, events, make_event):
        event = make_event(
            date_and_time="2025-03-05 18:00:00",
            further_dates=["2025-03-03 18:00:00", "2025-03-09 18:00:00"],
        )

        dates = events.get_event_dates(event)

        assert [d.to_w3c() for d in dates] == [
            "2025-03-03T18:00:00+01:00",
            "2025-03-05T18:00:00+01:00",
            "2025-03-09T18:00:00+01:00",
        ]
        assert [d.is_current for d in dates] == [False, True, False]

    def test_recurrence_lists_whole_series(self, saver, events, make_event):
        event = make_event(further_dates=["2025-03-03 18:00:00"])
        recurrence = saver.recurrence_engine.get_recurrences(event)[0]

        dates = events.get_event_dates(recurrence)

        assert [d.record_id for d in dates] == [event.id, recurrence.id]
        assert [d.is_current for d in dates] == [False, True]

    def test_explicit_current_record(self, events, make_event):
        event = make_event()

        assert events.get_event_dates(event, current_record_id=0)[0].is_current is False

    def test_location_has_no_dates(self, events, make_location):
        assert events.get_event_dates(make_location()) == []


class TestDisplay:
    """Tests for date, duration and filter display."""

    def test_date_and_duration(self, events, make_event):
        event = make_event(date_and_time="2025-03-01 18:00:00", duration="1:30")

        assert events.get_event_duration(event) == "90 Minutes"
        assert events.get_event_date_and_duration(event) == "01 March 2025, 18:00, 90 Minutes"

    def test_date_without_duration(self, events, make_event):
        event = make_event(date_and_time="2025-03-01 18:00:00")

        assert events.get_event_duration(event) is None
        assert events.get_event_date_and_duration(event) == "01 March 2025, 18:00"

    def test_non_event(self, events, make_location):
        location = make_location()

        assert events.get_event_duration(location) is None
        assert events.get_event_date_and_duration(location) is None
        assert events.get_event_filters(location) == []

    def test_filters(self, events, make_event):
        event = make_event(filters=["Talk", "Concert"])

        assert [term.name for term in events.get_event_filters(event)] == ["Concert", "Talk"]


class TestSearchTitle:
    """Tests for the search title."""

    def test_location_words_are_appended(self, events, make_event, make_location):
        event = make_event(title="Concert", location=make_location(title="Opera House", sort_name="House"))

        assert events.search_title(event) == "Concert Opera House"

    def test_words_already_in_title_are_not_repeated(self, events, make_event, make_location):
        event = make_event(title="Opera Gala", location=make_location(title="Opera"))

        assert events.search_title(event) == "Opera Gala"

    def test_explicit_title(self, events, make_event, make_location):
        event = make_event(location=make_location(title="Hall"))

        assert events.search_title(event, title="Draft title") == "Draft title Hall"

    def test_location_title_unchanged(self, events, make_location):
        location = make_location(title="Hall A")

        assert events.search_title(location) == "Hall A"


class TestPermalink:
    """Tests for public URLs."""

    def test_event_permalink(self, events, make_event):
        event = make_event(title="Spring Concert")

        assert events.permalink(event, "https://example.com/") == "https://example.com/event/spring-concert"

    def test_recurrence_links_to_parent(self, saver, events, make_event):
        event = make_event(title="Concert", further_dates=["2025-03-03 18:00:00"])
        recurrence = saver.recurrence_engine.get_recurrences(event)[0]

        assert events.permalink(recurrence) == f"/event/concert?recurrence={recurrence.id}"
