"""
Recurrence engine.

Materializes the further dates of an original event as recurrence records:
child records carrying a full copy of the event's fields with their own
date_and_time.

Design:
- Every save of a visible original event rebuilds its recurrences from
  scratch (delete all, then create one per further date)
- The rebuild holds a row lock on the parent so that concurrent saves of
  the same event never leave a mix of old and new recurrences
- Submitted further dates win over stored ones for the record being saved;
  translation peers are rebuilt from their own stored further dates
- Denormalized location fields are not copied; LocationSync recomputes
  them for each recurrence
- A malformed further date is skipped and reported; the other dates are
  still materialized
"""

import hashlib
from dataclasses import dataclass, field
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from eventsync.models import EventFields, Record, RecordType, Taxonomies
from eventsync.services.content_store import ContentStore
from eventsync.services.date_service import DateService
from eventsync.services.exceptions import (
    DateEqualsOriginalError,
    DuplicateDateError,
    InvalidDateFormatError,
    MissingPrerequisiteError,
    ValidationError,
)
from eventsync.services.field_store import FieldStore
from eventsync.services.location_sync import LocationSync
from eventsync.services.save_context import SaveContext
from eventsync.services.taxonomy_store import TaxonomyStore
from eventsync.services.translation_links import TranslationLinkService
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")


@dataclass
class RecurrenceSyncResult:
    """Outcome of rebuilding the recurrences of one event."""

    parent_id: int
    deleted: int = 0
    created: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class RecurrenceEngine:
    """
    Service creating and deleting recurrences.

    Usage:
        >>> engine = RecurrenceEngine(db_session, date_service=dates)
        >>> result = engine.create_recurrences(event)
        >>> len(result.created)
        2
    """

    def __init__(
        self,
        db: Session,
        content_store: Optional[ContentStore] = None,
        field_store: Optional[FieldStore] = None,
        taxonomy_store: Optional[TaxonomyStore] = None,
        translation_links: Optional[TranslationLinkService] = None,
        location_sync: Optional[LocationSync] = None,
        date_service: Optional[DateService] = None,
    ):
        """
        Initialize recurrence engine and register the recurrence type.

        Raises:
            MissingPrerequisiteError: If the event type is not registered
        """
        self.db = db
        self.content_store = content_store or ContentStore(db)
        self.field_store = field_store or FieldStore(db)
        self.taxonomy_store = taxonomy_store or TaxonomyStore(db)
        self.translation_links = translation_links or TranslationLinkService(
            db, self.taxonomy_store
        )
        self.location_sync = location_sync or LocationSync(
            db, self.content_store, self.field_store
        )
        self.date_service = date_service or DateService()

        if not self.content_store.type_exists(RecordType.EVENT.value):
            raise MissingPrerequisiteError(
                f"Record type doesn't exist: {RecordType.EVENT.value}"
            )
        self.content_store.register_type(RecordType.RECURRENCE.value)

    def sync(self, record: Record, context: Optional[SaveContext] = None) -> List[RecurrenceSyncResult]:
        """
        Rebuild recurrences for a saved original event and its translation peers.
        """
        if not self.content_store.is_original_event(record):
            return []

        submitted = None
        if context is not None and context.has_submitted(EventFields.FURTHER_DATES):
            submitted = context.submitted[EventFields.FURTHER_DATES]

        results = [self.create_recurrences(record, submitted)]

        for language, peer_id in self.translation_links.get_translations(record).items():
            if peer_id == record.id:
                continue
            peer = self.content_store.find(peer_id)
            if peer is not None:
                results.append(self.create_recurrences(peer))

        return results

    def create_recurrences(
        self,
        event: Record,
        submitted_further_dates: Optional[Any] = None,
    ) -> RecurrenceSyncResult:
        """
        Replace all recurrences of an original event.

        Existing recurrences are always deleted. New ones are only created
        while the event has a visible status.

        Args:
            event: Original event
            submitted_further_dates: Further-date rows submitted with this
                save; None means use the stored value
        """
        result = RecurrenceSyncResult(parent_id=event.id)
        if not self.content_store.is_original_event(event):
            return result

        self._lock_parent(event)
        result.deleted = self.delete_recurrences(event)

        if not event.is_visible:
            return result

        if submitted_further_dates is not None:
            raw = submitted_further_dates
        else:
            raw = self.field_store.get_value(event, EventFields.FURTHER_DATES)

        for value in self.extract_dates(raw):
            try:
                date_time = self.date_service.normalize(value)
            except InvalidDateFormatError as e:
                logger.error(
                    "Skipping malformed further date",
                    extra={"event_id": event.id, "value": value}
                )
                result.errors.append(e.message)
                continue
            recurrence = self.create_recurrence(event, date_time)
            result.created.append(recurrence.id)

        logger.info(
            "Rebuilt recurrences",
            extra={
                "event_id": event.id,
                "recurrences_deleted": result.deleted,
                "recurrences_created": len(result.created),
            }
        )
        return result

    def create_recurrence(self, event: Record, date_time: str) -> Record:
        """
        Create one recurrence of an original event.

        The recurrence copies the event's title, status, language, publish
        date, fields (with date_and_time replaced) and terms (except the
        translation group).

        Raises:
            ValidationError: If the record is not an original event
            InvalidDateFormatError: If date_time is not YYYY-MM-DD HH:MM:SS
        """
        if not self.content_store.is_original_event(event):
            raise ValidationError(f"Not an original event: {event.id}")
        if not self.date_service.is_valid_date_format(date_time):
            raise InvalidDateFormatError(date_time, field=EventFields.DATE_AND_TIME)

        values = {
            name: value
            for name, value in self.field_store.get_values(event).items()
            if not self.field_store.is_managed(name)
        }
        values[EventFields.DATE_AND_TIME] = date_time
        term_sets = self.taxonomy_store.get_term_sets(
            event, exclude=(Taxonomies.TRANSLATIONS,)
        )

        digest = hashlib.md5(date_time.encode("utf-8")).hexdigest()
        recurrence = self.content_store.create(
            RecordType.RECURRENCE.value,
            title=event.title,
            status=event.status,
            slug=f"{event.slug}-{digest}",
            parent_id=event.id,
            language=event.language,
            published_at=event.published_at,
        )
        self.field_store.set_values(recurrence, values)
        self.taxonomy_store.set_term_sets(recurrence, term_sets)
        self.location_sync.sync_event(recurrence)

        logger.debug(
            "Created recurrence",
            extra={"event_id": event.id, "recurrence_id": recurrence.id, "date_and_time": date_time}
        )
        return recurrence

    def delete_recurrences(self, event: Record) -> int:
        """
        Delete every recurrence of an original event.

        Returns:
            Number of recurrences deleted
        """
        if not self.content_store.is_original_event(event):
            return 0

        recurrences = self.get_recurrences(event)
        for recurrence in recurrences:
            self.content_store.delete(recurrence)
        return len(recurrences)

    def get_recurrences(self, event: Record) -> List[Record]:
        """Recurrences of an event, in creation order."""
        return (
            self.db.query(Record)
            .filter(
                Record.parent_id == event.id,
                Record.record_type == RecordType.RECURRENCE.value,
            )
            .order_by(Record.id)
            .all()
        )

    def check_further_date(
        self,
        value: str,
        original_date: Optional[str],
        submitted_dates: List[str],
    ) -> None:
        """
        Validate one submitted further date.

        Args:
            value: The further date being checked
            original_date: The event's own submitted date_and_time
            submitted_dates: Every further date in the submission

        Raises:
            DateEqualsOriginalError: If value equals the event's date and time
            DuplicateDateError: If value occurs more than once in the submission
        """
        comparable = self._comparable(value)
        if original_date and comparable == self._comparable(original_date):
            raise DateEqualsOriginalError(value, field=EventFields.FURTHER_DATES)
        if sum(1 for other in submitted_dates if self._comparable(other) == comparable) > 1:
            raise DuplicateDateError(value, field=EventFields.FURTHER_DATES)

    def validate_further_dates(self, original_date: Optional[str], further_dates: Any) -> List[str]:
        """
        Validate a submitted list of further-date rows.

        Returns:
            One message per offending row (empty when everything is valid)
        """
        dates = self.extract_dates(further_dates)
        messages = []
        for value in dates:
            try:
                self.check_further_date(value, original_date, dates)
            except ValidationError as e:
                messages.append(e.message)
        return messages

    @staticmethod
    def extract_dates(further_dates: Any) -> List[str]:
        """
        Date strings from further-date rows.

        Rows are dicts with a date_and_time key (plain strings are accepted
        too); blank rows are skipped.
        """
        if not isinstance(further_dates, list):
            return []
        dates = []
        for row in further_dates:
            if isinstance(row, dict):
                row = row.get(EventFields.FURTHER_DATES_DATE_AND_TIME)
            if isinstance(row, str) and row.strip():
                dates.append(row.strip())
        return dates

    def _comparable(self, value: str) -> str:
        try:
            return self.date_service.normalize(value)
        except InvalidDateFormatError:
            return value

    def _lock_parent(self, event: Record) -> None:
        self.db.query(Record.id).filter(Record.id == event.id).with_for_update().first()
