"""
Conversion between API schemas and records.

Requests reference locations by GUID; records store the internal ID in the
location_id field. Responses expose GUIDs only.
"""

from typing import Any, Dict, List, Optional

from eventsync.models import EventFields, LocationFields, Record, RecordType
from eventsync.schemas.archive import ArchiveEvent
from eventsync.schemas.event import (
    EventDateResponse,
    EventResponse,
    EventSaveResponse,
    FilterSummary,
    FurtherDate,
)
from eventsync.schemas.location import LocationEventSummary, LocationResponse
from eventsync.services.event_service import EventService
from eventsync.services.exceptions import NotFoundError, ValidationError
from eventsync.services.location_sync import LocationSync
from eventsync.services.recurrence_engine import RecurrenceEngine
from eventsync.services.save_pipeline import RecordSaveOrchestrator, SaveResult


# Event request attributes stored 1:1 as fields
EVENT_SCALAR_FIELDS = (
    EventFields.DATE_AND_TIME,
    EventFields.DURATION,
    EventFields.QUICK_INFOS,
    EventFields.EXTERNAL_LINK,
    EventFields.TICKET_LINK,
)

LOCATION_FIELDS = (
    LocationFields.SORT_NAME,
    LocationFields.ADDRESS,
    LocationFields.AREA,
    LocationFields.TEL,
    LocationFields.EMAIL,
    LocationFields.WEBSITE,
    LocationFields.MAPS_URL,
)


class RecordPresenter:
    """Builds field dicts from requests and responses from records."""

    def __init__(self, saver: RecordSaveOrchestrator, event_service: EventService):
        self.saver = saver
        self.content_store = saver.content_store
        self.field_store = saver.field_store
        self.event_service = event_service

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def event_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Field values from a (partial) event request dict."""
        fields = {name: data[name] for name in EVENT_SCALAR_FIELDS if name in data}

        if "further_dates" in data:
            rows = data["further_dates"] or []
            fields[EventFields.FURTHER_DATES] = [
                {EventFields.FURTHER_DATES_DATE_AND_TIME: row["date_and_time"]} for row in rows
            ]

        if "location_guid" in data:
            fields[EventFields.LOCATION_ID] = self.location_id(data["location_guid"])

        return fields

    def location_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {name: data[name] for name in LOCATION_FIELDS if name in data}

    def location_id(self, guid: Optional[str]) -> Optional[int]:
        if not guid:
            return None
        try:
            return self.content_store.get_by_guid(guid, RecordType.LOCATION.value).id
        except NotFoundError:
            raise ValidationError(f"Unknown location: {guid}", field="location_guid")

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def event_response(self, record: Record) -> EventResponse:
        return EventResponse(**self._event_data(record))

    def event_save_response(self, result: SaveResult) -> EventSaveResponse:
        data = self._event_data(result.record)
        recurrence_ids = [
            record_id for sync in result.recurrences[:1] for record_id in sync.created
        ]
        data["recurrence_guids"] = [self.content_store.get(rid).guid for rid in recurrence_ids]
        data["translations"] = {
            language: self.content_store.get(record_id).guid
            for language, record_id in result.translations.items()
        }
        data["warnings"] = result.errors
        return EventSaveResponse(**data)

    def event_dates(self, record: Record, current_record_id: Optional[int] = None) -> List[EventDateResponse]:
        dates = self.event_service.get_event_dates(record, current_record_id)
        return [
            EventDateResponse(
                date=event_date.to_w3c(),
                display=self.saver.date_service.format_date_and_time(event_date.date),
                guid=self.content_store.get(event_date.record_id).guid,
                is_current=event_date.is_current,
            )
            for event_date in dates
        ]

    def archive_event(self, record: Record) -> ArchiveEvent:
        return ArchiveEvent(
            guid=record.guid,
            title=record.title,
            date_and_time=self.field_store.get_value(record, EventFields.DATE_AND_TIME),
            date_and_duration=self.event_service.get_event_date_and_duration(record),
            location_name=self.field_store.get_value(record, EventFields.LOCATION_NAME) or None,
            permalink=self.event_service.permalink(record),
        )

    def location_response(self, record: Record, events_updated: int = 0) -> LocationResponse:
        values = self.field_store.get_values(record)
        return LocationResponse(
            guid=record.guid,
            title=record.title,
            slug=record.slug,
            status=record.status,
            language=record.language,
            events_updated=events_updated,
            created_at=record.created_at,
            updated_at=record.updated_at,
            **{name: values.get(name) for name in LOCATION_FIELDS},
        )

    def location_event(self, record: Record) -> LocationEventSummary:
        return LocationEventSummary(
            guid=record.guid,
            title=record.title,
            status=record.status,
            date_and_time=self.field_store.get_value(record, EventFields.DATE_AND_TIME),
        )

    def _event_data(self, record: Record) -> Dict[str, Any]:
        values = self.field_store.get_values(record)

        location_guid = None
        location = self.content_store.find(
            LocationSync.parse_location_id(values.get(EventFields.LOCATION_ID))
        )
        if location is not None and self.content_store.is_location(location):
            location_guid = location.guid

        parent_guid = None
        if record.parent_id:
            parent = self.content_store.find(record.parent_id)
            parent_guid = parent.guid if parent else None

        return {
            "guid": record.guid,
            "record_type": record.record_type,
            "title": record.title,
            "slug": record.slug,
            "status": record.status,
            "language": record.language,
            "parent_guid": parent_guid,
            "date_and_time": values.get(EventFields.DATE_AND_TIME),
            "duration": values.get(EventFields.DURATION),
            "date_and_duration": self.event_service.get_event_date_and_duration(record),
            "further_dates": [
                FurtherDate(date_and_time=value)
                for value in RecurrenceEngine.extract_dates(values.get(EventFields.FURTHER_DATES))
            ],
            "location_guid": location_guid,
            "location_name": values.get(EventFields.LOCATION_NAME),
            "location_sort_name": values.get(EventFields.LOCATION_SORT_NAME),
            "quick_infos": values.get(EventFields.QUICK_INFOS),
            "external_link": values.get(EventFields.EXTERNAL_LINK),
            "ticket_link": values.get(EventFields.TICKET_LINK),
            "filters": [
                FilterSummary.model_validate(term)
                for term in self.event_service.get_event_filters(record)
            ],
            "permalink": self.event_service.permalink(record),
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
