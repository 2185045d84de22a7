"""
Grouping engine.

Expands a grouped probe page into titled buckets of events. The probe tells
which buckets are on the current page; a second, unpaginated query then
fetches every event whose bucket key lies between the first and the last
bucket of the page.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from eventsync.models import EventFields, Record
from eventsync.services.archive_query_planner import VIEW_CALENDAR, VIEW_LOCATIONS
from eventsync.services.content_store import ContentStore
from eventsync.services.date_service import DateService
from eventsync.services.field_store import FieldStore
from eventsync.services.query import FieldFilter, QueryResult, QuerySpec
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")


@dataclass
class GroupedEvents:
    """One bucket of the current batch."""

    title: str
    records: List[Record] = field(default_factory=list)


class GroupingEngine:
    """
    Service turning an archive query result into the current batch.

    Usage:
        >>> spec = planner.plan(view="calendar")
        >>> result = content_store.query(spec)
        >>> batch = grouping.get_current_batch(result, spec)
        >>> [group.title for group in batch]
        ['Today, 01. March 2025', '03 March 2025']
    """

    def __init__(
        self,
        db: Session,
        content_store: Optional[ContentStore] = None,
        field_store: Optional[FieldStore] = None,
        date_service: Optional[DateService] = None,
    ):
        self.db = db
        self.content_store = content_store or ContentStore(db)
        self.field_store = field_store or FieldStore(db)
        self.date_service = date_service or DateService()

    def get_current_batch(self, result: QueryResult, spec: QuerySpec) -> list:
        """
        Current batch for a view.

        Returns:
            List of GroupedEvents for the calendar and locations views, the
            records themselves otherwise; empty when the probe found nothing
        """
        if not result.items:
            return []
        if spec.view == VIEW_CALENDAR and spec.is_grouped:
            return self.group_by_day(result, spec)
        if spec.view == VIEW_LOCATIONS and spec.is_grouped:
            return self.group_by_location(result, spec)
        return list(result.items)

    def group_by_day(self, result: QueryResult, spec: QuerySpec) -> List[GroupedEvents]:
        """Bucket events by calendar day; titles are relative to today."""
        days = [row.day for row in result.items]
        full = spec.ungrouped().with_filters(**{
            EventFields.DATE_AND_TIME: FieldFilter(
                EventFields.DATE_AND_TIME,
                compare="BETWEEN",
                value=(days[0], days[-1]),
                cast="DATE",
            ),
        })
        events = self.content_store.query(full).items
        dates = self.field_store.get_values_for(
            [event.id for event in events], EventFields.DATE_AND_TIME
        )

        buckets: Dict[str, List[Record]] = {}
        for event in events:
            title = self.date_service.format_day_relative_to_today(dates[event.id])
            buckets.setdefault(title, []).append(event)

        logger.debug(
            "Grouped events by day",
            extra={"days": len(buckets), "events": len(events)}
        )
        return [GroupedEvents(title=title, records=group) for title, group in buckets.items()]

    def group_by_location(self, result: QueryResult, spec: QuerySpec) -> List[GroupedEvents]:
        """Bucket events by location name, in sort-name order."""
        sort_names = [row.location_sort_name for row in result.items]
        full = spec.ungrouped().with_filters(
            min_location_sort_name=FieldFilter(
                EventFields.LOCATION_SORT_NAME, compare=">=", value=sort_names[0]
            ),
            max_location_sort_name=FieldFilter(
                EventFields.LOCATION_SORT_NAME, compare="<=", value=sort_names[-1]
            ),
        )
        events = self.content_store.query(full).items
        names = self.field_store.get_values_for(
            [event.id for event in events], EventFields.LOCATION_NAME
        )

        buckets: Dict[str, List[Record]] = {}
        for event in events:
            buckets.setdefault(names[event.id], []).append(event)

        logger.debug(
            "Grouped events by location",
            extra={"locations": len(buckets), "events": len(events)}
        )
        return [GroupedEvents(title=title, records=group) for title, group in buckets.items()]
