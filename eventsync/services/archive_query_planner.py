"""
Archive query planner.

Turns an archive request (view, page, language, filter, search) into a
QuerySpec. The calendar and locations views produce grouped probe queries
whose page_size counts buckets (days or locations), not events.
"""

from typing import Optional

from eventsync.config.settings import AppSettings, get_settings
from eventsync.models import EventFields, RecordType
from eventsync.services.date_service import DateService
from eventsync.services.query import FieldFilter, GroupingClause, QuerySpec
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")

VIEW_CALENDAR = "calendar"
VIEW_LOCATIONS = "locations"
VIEWS = (VIEW_CALENDAR, VIEW_LOCATIONS)


class ArchiveQueryPlanner:
    """
    Builds archive listing queries.

    Views:
        calendar: Upcoming events by date, one probe row per day
        locations: Events with a location by sort name, one probe row per location
        (default): Original events only, by date, ungrouped
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        date_service: Optional[DateService] = None,
    ):
        self.settings = settings or get_settings()
        self.date_service = date_service or DateService.from_settings(self.settings)

    def plan(
        self,
        view: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        language: Optional[str] = None,
        filter_term: Optional[str] = None,
        search: Optional[str] = None,
    ) -> QuerySpec:
        """
        Build the query for one archive page.

        Unknown views fall back to the default listing.
        """
        if view not in VIEWS:
            view = None

        spec = QuerySpec(
            record_types=(RecordType.EVENT.value,),
            order_by=[(EventFields.DATE_AND_TIME, "asc")],
            page=max(page or 1, 1),
            page_size=page_size or self.settings.archive_page_size,
            ignore_sticky=True,
            language=language,
            filter_term=filter_term or None,
            search=(search or "").strip() or None,
            view=view,
        )

        both_kinds = (RecordType.EVENT.value, RecordType.RECURRENCE.value)
        if view == VIEW_CALENDAR:
            spec = spec.replace(
                record_types=both_kinds,
                order_by=[(EventFields.DATE_AND_TIME, "asc")],
                filters={
                    EventFields.DATE_AND_TIME: FieldFilter(
                        EventFields.DATE_AND_TIME,
                        compare=">=",
                        value=self.date_service.now_iso(),
                        cast="DATETIME",
                    ),
                },
                clauses=GroupingClause(fields=("day",), group_by="day"),
            )
        elif view == VIEW_LOCATIONS:
            spec = spec.replace(
                record_types=both_kinds,
                order_by=[(EventFields.LOCATION_SORT_NAME, "asc")],
                filters={
                    EventFields.LOCATION_NAME: FieldFilter(
                        EventFields.LOCATION_NAME, compare="EXISTS"
                    ),
                    EventFields.LOCATION_SORT_NAME: FieldFilter(
                        EventFields.LOCATION_SORT_NAME, compare="EXISTS"
                    ),
                },
                clauses=GroupingClause(
                    fields=("location_name", "location_sort_name"),
                    group_by="location_sort_name",
                ),
            )

        logger.debug(
            "Planned archive query",
            extra={"view": view, "page": spec.page, "page_size": spec.page_size}
        )
        return spec
