"""
Record save orchestrator.

Runs the explicit save pipeline for every record write:

    LocationSync -> RecurrenceEngine -> TranslationSync

Each stage receives the SaveContext of the current save. Nested saves
(translation clones) run the same pipeline with a derived context instead
of relying on global re-entrancy flags.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from eventsync.config.settings import AppSettings, get_settings
from eventsync.models import EventFields, Record, RecordStatus, RecordType, Taxonomies
from eventsync.services.content_store import ContentStore
from eventsync.services.date_service import DateService
from eventsync.services.exceptions import InvalidDateFormatError, ServiceError, ValidationError
from eventsync.services.field_store import FieldStore
from eventsync.services.location_sync import CapabilityDecision, LocationSync
from eventsync.services.recurrence_engine import RecurrenceEngine, RecurrenceSyncResult
from eventsync.services.save_context import MAX_CASCADE_DEPTH, SaveContext
from eventsync.services.taxonomy_store import TaxonomyStore
from eventsync.services.translation_links import TranslationLinkService
from eventsync.services.translation_sync import TranslationSync
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")


@dataclass
class SaveResult:
    """What the pipeline did for one save."""

    record: Record
    location: Optional[Tuple[str, str]] = None
    locations_updated: int = 0
    recurrences: List[RecurrenceSyncResult] = field(default_factory=list)
    translations: Dict[str, int] = field(default_factory=dict)

    @property
    def errors(self) -> List[str]:
        """Non-fatal problems reported by the stages (e.g. skipped dates)."""
        return [message for result in self.recurrences for message in result.errors]


class RecordSaveOrchestrator:
    """
    Entry point for creating, updating, trashing, restoring and deleting records.

    Usage:
        >>> saver = RecordSaveOrchestrator(db_session, settings=settings)
        >>> result = saver.create_record(
        ...     "event",
        ...     title="Concert",
        ...     status="published",
        ...     fields={"date_and_time": "2025-03-01 18:00:00", "location_id": hall.id},
        ... )
        >>> result.location
        ('Hall A', 'Hall A')
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[AppSettings] = None,
        date_service: Optional[DateService] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.date_service = date_service or DateService.from_settings(self.settings)

        self.content_store = ContentStore(db)
        self.field_store = FieldStore(db)
        self.taxonomy_store = TaxonomyStore(db)
        self.translation_links = TranslationLinkService(db, self.taxonomy_store, self.settings)
        self.location_sync = LocationSync(db, self.content_store, self.field_store)
        self.recurrence_engine = RecurrenceEngine(
            db,
            content_store=self.content_store,
            field_store=self.field_store,
            taxonomy_store=self.taxonomy_store,
            translation_links=self.translation_links,
            location_sync=self.location_sync,
            date_service=self.date_service,
        )
        self.translation_sync = TranslationSync(
            db,
            content_store=self.content_store,
            field_store=self.field_store,
            taxonomy_store=self.taxonomy_store,
            translation_links=self.translation_links,
            settings=self.settings,
            pipeline=self.run_pipeline,
        )

        self.stages = [
            ("location_sync", self._location_stage),
            ("recurrences", self._recurrence_stage),
            ("translations", self._translation_stage),
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_record(
        self,
        record_type: str,
        title: str,
        status: str = RecordStatus.DRAFT.value,
        fields: Optional[Mapping[str, Any]] = None,
        terms: Optional[Mapping[str, List[str]]] = None,
        language: Optional[str] = None,
    ) -> SaveResult:
        """
        Create a record, store its fields and terms, then run the pipeline.

        Args:
            record_type: event or location
            title: Display title
            status: Initial status
            fields: Field values (managed fields are rejected)
            terms: Taxonomy -> term names
            language: Language code (default language when translations are on)

        Raises:
            ValidationError: If a field value is invalid
            WriteDeniedError: If a managed field is submitted
        """
        if record_type == RecordType.RECURRENCE.value:
            raise ValidationError("Recurrences are created from further dates only", field="record_type")

        fields = self.validate_fields(record_type, dict(fields or {}))
        if not language and self.settings.translations_enabled:
            language = self.settings.default_language or self.settings.active_languages_list[0]

        record = self.content_store.create(record_type, title=title, status=status, language=language)
        if fields:
            self.field_store.set_values(record, fields)
        if terms:
            self._assign_terms(record, terms)

        return self.run_pipeline(record, SaveContext(submitted=fields))

    def update_record(
        self,
        record: Record,
        title: Optional[str] = None,
        status: Optional[str] = None,
        fields: Optional[Mapping[str, Any]] = None,
        terms: Optional[Mapping[str, List[str]]] = None,
    ) -> SaveResult:
        """
        Update a record's attributes, fields and terms, then run the pipeline.

        Raises:
            ValidationError: If the record is a recurrence or a value is invalid
            WriteDeniedError: If a managed field is submitted
        """
        if self.content_store.is_recurrence(record):
            raise ValidationError("Recurrences are rebuilt from their event and cannot be edited")

        fields = self.validate_fields(record.record_type, dict(fields or {}), record)

        changes = {}
        if title is not None:
            changes["title"] = title
        if status is not None:
            changes["status"] = status
        if changes:
            self.content_store.update(record, **changes)
        if fields:
            self.field_store.set_values(record, fields)
        if terms:
            self._assign_terms(record, terms)

        return self.run_pipeline(record, SaveContext(submitted=fields))

    def write_field(self, record: Record, name: str, value: Any) -> SaveResult:
        """
        Write one field as an external writer and run the pipeline.

        Raises:
            WriteDeniedError: If the field is managed (its value is retained)
        """
        return self.update_record(record, fields={name: value})

    def save(self, record: Record, submitted: Optional[Mapping[str, Any]] = None) -> SaveResult:
        """Run the pipeline for a record whose changes are already stored."""
        return self.run_pipeline(record, SaveContext(submitted=dict(submitted or {})))

    def trash(self, record: Record) -> Record:
        """Move a record to the trash; an event's recurrences are removed."""
        self.content_store.update(record, status=RecordStatus.TRASHED.value)
        deleted = self.recurrence_engine.delete_recurrences(record)
        logger.info(
            "Trashed record",
            extra={"record_id": record.id, "recurrences_deleted": deleted}
        )
        return record

    def restore(self, record: Record, status: str = RecordStatus.DRAFT.value) -> SaveResult:
        """Restore a trashed record and run the pipeline again."""
        self.content_store.update(record, status=status)
        logger.info("Restored record", extra={"record_id": record.id, "status": status})
        return self.run_pipeline(record, SaveContext())

    def delete(self, record: Record) -> bool:
        """
        Permanently delete a record unless the capability check denies it.

        Returns:
            False when denied (referenced location), True when deleted
        """
        if self.location_sync.check_delete_capability(record) == CapabilityDecision.DENY:
            return False
        self.recurrence_engine.delete_recurrences(record)
        self.content_store.delete(record)
        return True

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def run_pipeline(self, record: Record, context: SaveContext) -> SaveResult:
        """Run every stage for one saved record."""
        if context.depth > MAX_CASCADE_DEPTH:
            raise ServiceError(f"Save cascade too deep for record {record.id}")

        result = SaveResult(record=record)
        for name, stage in self.stages:
            logger.debug(
                "Running save stage",
                extra={"stage": name, "record_id": record.id, "depth": context.depth}
            )
            stage(record, context, result)
        self.db.flush()
        return result

    def _location_stage(self, record: Record, context: SaveContext, result: SaveResult) -> None:
        if self.content_store.is_event(record):
            result.location = self.location_sync.sync_event(record, context)
        elif self.content_store.is_location(record):
            result.locations_updated = self.location_sync.on_location_saved(record, context)

    def _recurrence_stage(self, record: Record, context: SaveContext, result: SaveResult) -> None:
        result.recurrences = self.recurrence_engine.sync(record, context)

    def _translation_stage(self, record: Record, context: SaveContext, result: SaveResult) -> None:
        result.translations = self.translation_sync.sync(record, context)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_fields(
        self,
        record_type: str,
        fields: Dict[str, Any],
        record: Optional[Record] = None,
    ) -> Dict[str, Any]:
        """
        Validate submitted fields before anything is written.

        date_and_time is normalized to the canonical format and location_id
        to an integer id (or None). Further dates must differ from the
        event's own date and from each other; a new date_and_time is also
        checked against the stored further dates.

        Returns:
            The fields, with date_and_time normalized

        Raises:
            ValidationError: On the first invalid field
            WriteDeniedError: If a managed field is submitted
        """
        self.field_store.check_writable(fields.keys())

        if record_type != RecordType.EVENT.value:
            return fields

        if fields.get(EventFields.DATE_AND_TIME):
            try:
                fields[EventFields.DATE_AND_TIME] = self.date_service.normalize(
                    fields[EventFields.DATE_AND_TIME]
                )
            except InvalidDateFormatError as e:
                raise InvalidDateFormatError(e.value, field=EventFields.DATE_AND_TIME) from e

        # Stored as the plain decimal id so reference lookups match it exactly
        if EventFields.LOCATION_ID in fields:
            fields[EventFields.LOCATION_ID] = LocationSync.parse_location_id(
                fields[EventFields.LOCATION_ID]
            )

        if (
            fields.get(EventFields.DATE_AND_TIME)
            and EventFields.FURTHER_DATES not in fields
            and record is not None
        ):
            stored = RecurrenceEngine.extract_dates(
                self.field_store.get_value(record, EventFields.FURTHER_DATES)
            )
            for value in stored:
                self.recurrence_engine.check_further_date(
                    value, fields[EventFields.DATE_AND_TIME], [value]
                )

        if EventFields.FURTHER_DATES in fields:
            further_dates = fields[EventFields.FURTHER_DATES]
            if further_dates is not None and not isinstance(further_dates, list):
                raise ValidationError("Further dates must be a list", field=EventFields.FURTHER_DATES)

            original = fields.get(EventFields.DATE_AND_TIME)
            if original is None and record is not None:
                original = self.field_store.get_value(record, EventFields.DATE_AND_TIME)

            messages = self.recurrence_engine.validate_further_dates(original, further_dates)
            if messages:
                raise ValidationError(
                    "; ".join(dict.fromkeys(messages)),
                    field=EventFields.FURTHER_DATES,
                )
            if further_dates is None:
                fields[EventFields.FURTHER_DATES] = []

        return fields

    def _assign_terms(self, record: Record, terms: Mapping[str, List[str]]) -> None:
        for taxonomy, names in terms.items():
            if taxonomy == Taxonomies.TRANSLATIONS:
                raise ValidationError("Translation groups cannot be assigned directly", field="terms")
            term_ids = [self.taxonomy_store.ensure_term(taxonomy, name).id for name in names]
            self.taxonomy_store.set_terms(record, taxonomy, term_ids)
