"""
Event service with read-side helpers for event pages.

Provides the date list of an event (its own date plus every recurrence),
display strings for date and duration, classification filters, search
titles and permalinks.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from eventsync.models import EventFields, Record, RecordType, Taxonomies, Term
from eventsync.services.content_store import ContentStore
from eventsync.services.date_service import DateService
from eventsync.services.field_store import FieldStore
from eventsync.services.taxonomy_store import TaxonomyStore


@dataclass(frozen=True)
class EventDate:
    """
    One date of an event.

    Attributes:
        date: Aware datetime in the site timezone
        record_id: Event or recurrence carrying this date
        is_current: True when record_id is the record being viewed
    """

    date: datetime
    record_id: int
    is_current: bool = False

    def to_w3c(self) -> str:
        return self.date.isoformat(timespec="seconds")


class EventService:
    """
    Service for event display helpers.

    Usage:
        >>> events = EventService(db_session, date_service=dates)
        >>> [d.to_w3c() for d in events.get_event_dates(event)]
        ['2025-03-01T18:00:00+00:00', '2025-03-03T18:00:00+00:00']
        >>> events.get_event_date_and_duration(event)
        '01 March 2025, 18:00, 90 Minutes'
    """

    def __init__(
        self,
        db: Session,
        content_store: Optional[ContentStore] = None,
        field_store: Optional[FieldStore] = None,
        taxonomy_store: Optional[TaxonomyStore] = None,
        date_service: Optional[DateService] = None,
    ):
        self.db = db
        self.content_store = content_store or ContentStore(db)
        self.field_store = field_store or FieldStore(db)
        self.taxonomy_store = taxonomy_store or TaxonomyStore(db)
        self.date_service = date_service or DateService()

    def get_event_dates(
        self,
        record: Record,
        current_record_id: Optional[int] = None,
    ) -> List[EventDate]:
        """
        Dates of an event and its recurrences, ascending.

        A recurrence resolves to its parent, so every date of the series is
        listed. Records without a date are skipped.

        Args:
            record: Event or recurrence
            current_record_id: Record being viewed (default: record itself)
        """
        if not self.content_store.is_event(record):
            return []

        current = current_record_id if current_record_id is not None else record.id
        event = record
        if self.content_store.is_recurrence(record) and record.parent_id:
            event = self.content_store.get(record.parent_id)

        record_ids = [event.id] + [
            record_id for (record_id,) in
            self.db.query(Record.id)
            .filter(
                Record.parent_id == event.id,
                Record.record_type == RecordType.RECURRENCE.value,
            )
            .all()
        ]
        dates = self.field_store.get_values_for(record_ids, EventFields.DATE_AND_TIME)

        return [
            EventDate(
                date=self.date_service.parse(value),
                record_id=record_id,
                is_current=record_id == current,
            )
            for record_id, value in sorted(
                ((rid, v) for rid, v in dates.items() if v),
                key=lambda item: item[1],
            )
        ]

    def get_event_filters(self, record: Record) -> List[Term]:
        """Classification terms of an event."""
        if not self.content_store.is_event(record):
            return []
        return self.taxonomy_store.get_terms(record, Taxonomies.EVENT_FILTER)

    def get_event_duration(self, record: Record) -> Optional[str]:
        """Duration label such as "90 Minutes", or None."""
        if not self.content_store.is_event(record):
            return None
        return self.date_service.duration_label(
            self.field_store.get_value(record, EventFields.DURATION)
        )

    def get_event_date_and_duration(self, record: Record) -> Optional[str]:
        """Date, time and duration joined by ", ", skipping empty parts."""
        if not self.content_store.is_event(record):
            return None

        raw = self.field_store.get_value(record, EventFields.DATE_AND_TIME)
        parts = []
        if raw:
            parsed = self.date_service.parse(raw)
            parts.append(parsed.strftime(self.date_service.date_format))
            parts.append(parsed.strftime(self.date_service.time_format))
        parts.append(self.get_event_duration(record))
        return ", ".join(part for part in parts if part)

    def search_title(self, record: Record, title: Optional[str] = None) -> str:
        """
        Title used for search indexing.

        Words of the location name and sort name are appended unless the
        title already contains them.
        """
        title = record.title if title is None else title
        if not self.content_store.is_event(record):
            return title

        tokens = " ".join(
            value for value in (
                self.field_store.get_value(record, EventFields.LOCATION_NAME),
                self.field_store.get_value(record, EventFields.LOCATION_SORT_NAME),
            ) if value
        )
        for word in tokens.split():
            if f" {word} " not in f" {title} ":
                title = f"{title} {word}"
        return title

    def permalink(self, record: Record, base_url: str = "") -> str:
        """
        Public URL of a record.

        Recurrences link to their parent with ?recurrence=<id>.
        """
        base_url = base_url.rstrip("/")
        if self.content_store.is_recurrence(record) and record.parent_id:
            parent = self.content_store.get(record.parent_id)
            return f"{self.permalink(parent, base_url)}?recurrence={record.id}"
        return f"{base_url}/{record.record_type}/{record.slug}"
