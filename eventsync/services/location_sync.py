"""
Location sync service.

Keeps the denormalized location_name and location_sort_name fields of events
and recurrences in sync with the location they reference, and guards
locations that are still referenced against deletion.

Design:
- This service is the only writer of the two denormalized fields
- An event is recomputed whenever it is saved (using its submitted
  location_id when one was submitted)
- A visible location pushes its name onto every event referencing it when
  it is saved
- The sort name falls back to the location title when none is set
"""

import enum
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from eventsync.models import (
    EventFields,
    LocationFields,
    Record,
    RecordField,
    RecordStatus,
    RecordType,
)
from eventsync.services.content_store import ContentStore
from eventsync.services.exceptions import ValidationError
from eventsync.services.field_store import FieldStore
from eventsync.services.save_context import SaveContext
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")


class CapabilityDecision(enum.Enum):
    """Outcome of a capability check."""
    ALLOW = "allow"
    DENY = "deny"


class LocationSync:
    """
    Service maintaining location-derived fields on events.

    Usage:
        >>> sync = LocationSync(db_session)
        >>> sync.update_event(event, location.id)
        ('Hall A', 'Hall A')
        >>> sync.check_delete_capability(location)
        <CapabilityDecision.DENY: 'deny'>
    """

    WRITER = "location_sync"

    def __init__(
        self,
        db: Session,
        content_store: Optional[ContentStore] = None,
        field_store: Optional[FieldStore] = None,
    ):
        self.db = db
        self.content_store = content_store or ContentStore(db)
        self.field_store = field_store or FieldStore(db)

    def update_event(self, event: Record, location_id: Optional[int]) -> Tuple[str, str]:
        """
        Write the denormalized location fields of one event.

        An unknown location, or one that is not a location record, clears
        both fields.

        Returns:
            (location_name, location_sort_name) as written

        Raises:
            ValidationError: If the record is not an event or recurrence
        """
        if not self.content_store.is_event(event):
            raise ValidationError(f"Not an event: {event.id}", field="location_id")

        name = ""
        sort_name = ""
        location = self.content_store.find(location_id) if location_id else None
        if location is not None and self.content_store.is_location(location):
            name = location.title
            sort_name = self.field_store.get_value(location, LocationFields.SORT_NAME) or name

        self.field_store.set_values(
            event,
            {
                EventFields.LOCATION_NAME: name,
                EventFields.LOCATION_SORT_NAME: sort_name,
            },
            writer=self.WRITER,
        )
        logger.debug(
            "Updated event location",
            extra={"event_id": event.id, "location_id": location_id, "location_name": name}
        )
        return name, sort_name

    def sync_event(
        self,
        event: Record,
        context: Optional[SaveContext] = None,
    ) -> Optional[Tuple[str, str]]:
        """
        Recompute an event's location fields on save.

        The submitted location_id (if any) wins over the stored one, since
        the stored value may not be committed yet.
        """
        if not self.content_store.is_event(event):
            return None

        if context is not None and context.has_submitted(EventFields.LOCATION_ID):
            raw = context.submitted[EventFields.LOCATION_ID]
        else:
            raw = self.field_store.get_value(event, EventFields.LOCATION_ID)

        return self.update_event(event, self.parse_location_id(raw))

    def on_location_saved(self, location: Record, context: Optional[SaveContext] = None) -> int:
        """
        Push a saved location's name onto every event referencing it.

        Returns:
            Number of events updated
        """
        if not self.content_store.is_location(location):
            return 0
        if not location.is_visible:
            return 0
        if context is not None and context.suppress_location_cascade:
            return 0

        events = self.get_events_at_location(location.id)
        for event in events:
            self.update_event(event, location.id)

        logger.info(
            "Pushed location to events",
            extra={"location_id": location.id, "event_count": len(events)}
        )
        return len(events)

    def get_events_at_location(
        self,
        location_id: int,
        limit: Optional[int] = None,
    ) -> List[Record]:
        """
        Events and recurrences (any status except trashed) referencing a location.
        """
        query = (
            self.db.query(Record)
            .join(
                RecordField,
                (RecordField.record_id == Record.id)
                & (RecordField.name == EventFields.LOCATION_ID)
            )
            .filter(
                Record.record_type.in_((RecordType.EVENT.value, RecordType.RECURRENCE.value)),
                Record.status != RecordStatus.TRASHED.value,
                RecordField.value == str(location_id),
            )
            .order_by(Record.id)
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def check_delete_capability(self, record: Record) -> CapabilityDecision:
        """
        Decide whether a record may be deleted.

        Locations referenced by at least one event are denied; everything
        else is allowed.
        """
        if not self.content_store.is_location(record):
            return CapabilityDecision.ALLOW
        if self.get_events_at_location(record.id, limit=1):
            logger.info(
                "Location deletion denied",
                extra={"location_id": record.id}
            )
            return CapabilityDecision.DENY
        return CapabilityDecision.ALLOW

    @staticmethod
    def parse_location_id(raw) -> Optional[int]:
        """Interpret a stored or submitted location reference."""
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            return raw or None
        text = str(raw).strip()
        return int(text) if text.isdigit() and int(text) > 0 else None
