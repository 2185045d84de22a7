"""
Unit tests for ArchiveQueryPlanner.

Tests the QuerySpec built for each archive view.
"""

import pytest

from eventsync.models import EventFields
from eventsync.services.archive_query_planner import (
    ArchiveQueryPlanner,
    VIEW_CALENDAR,
    VIEW_LOCATIONS,
)
from eventsync.services.query import GroupingClause


@pytest.fixture
def planner(test_settings, date_service):
    return ArchiveQueryPlanner(settings=test_settings, date_service=date_service)


class TestDefaultView:
    """Tests for the ungrouped default listing."""

    def test_events_only_by_date(self, planner):
        spec = planner.plan()

        assert spec.record_types == ("event",)
        assert spec.statuses == ("published",)
        assert spec.order_by == [(EventFields.DATE_AND_TIME, "asc")]
        assert spec.filters == {}
        assert spec.is_grouped is False
        assert spec.view is None

    def test_unknown_view_falls_back_to_default(self, planner):
        spec = planner.plan(view="timeline")

        assert spec.view is None
        assert spec.is_grouped is False

    def test_page_size_defaults_to_settings(self, planner):
        assert planner.plan().page_size == 6
        assert planner.plan(page_size=10).page_size == 10

    def test_page_is_at_least_one(self, planner):
        assert planner.plan(page=0).page == 1
        assert planner.plan(page=-3).page == 1
        assert planner.plan(page=4).page == 4

    def test_request_filters_are_passed_through(self, planner):
        spec = planner.plan(language="en", filter_term="concert", search="  jazz ")

        assert spec.language == "en"
        assert spec.filter_term == "concert"
        assert spec.search == "jazz"

    def test_blank_search_is_dropped(self, planner):
        assert planner.plan(search="   ").search is None
        assert planner.plan(filter_term="").filter_term is None


class TestCalendarView:
    """Tests for the calendar view."""

    def test_upcoming_events_and_recurrences_grouped_by_day(self, planner):
        spec = planner.plan(view=VIEW_CALENDAR)

        assert spec.view == VIEW_CALENDAR
        assert spec.record_types == ("event", "recurrence")
        assert spec.order_by == [(EventFields.DATE_AND_TIME, "asc")]
        assert spec.clauses == GroupingClause(fields=("day",), group_by="day")

    def test_from_now_filter(self, planner):
        spec = planner.plan(view=VIEW_CALENDAR)

        date_filter = spec.filters[EventFields.DATE_AND_TIME]
        assert date_filter.compare == ">="
        assert date_filter.value == "2025-03-01 12:00:00"
        assert date_filter.cast == "DATETIME"


class TestLocationsView:
    """Tests for the locations view."""

    def test_events_with_location_grouped_by_sort_name(self, planner):
        spec = planner.plan(view=VIEW_LOCATIONS)

        assert spec.view == VIEW_LOCATIONS
        assert spec.record_types == ("event", "recurrence")
        assert spec.order_by == [(EventFields.LOCATION_SORT_NAME, "asc")]
        assert spec.clauses == GroupingClause(
            fields=("location_name", "location_sort_name"),
            group_by="location_sort_name",
        )

    def test_location_fields_must_exist(self, planner):
        spec = planner.plan(view=VIEW_LOCATIONS)

        assert {name: f.compare for name, f in spec.filters.items()} == {
            EventFields.LOCATION_NAME: "EXISTS",
            EventFields.LOCATION_SORT_NAME: "EXISTS",
        }
