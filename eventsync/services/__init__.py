"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from eventsync.services.exceptions import (
    ServiceError,
    NotFoundError,
    ConflictError,
    ValidationError,
    InvalidDateFormatError,
    DateEqualsOriginalError,
    DuplicateDateError,
    MissingPrerequisiteError,
    WriteDeniedError,
    TranslationCreateFailedError,
)
from eventsync.services.date_service import DateService
from eventsync.services.query import (
    FieldFilter,
    GroupingClause,
    QuerySpec,
    QueryResult,
    ProbeRow,
)
from eventsync.services.save_context import SaveContext
from eventsync.services.content_store import ContentStore
from eventsync.services.field_store import FieldStore
from eventsync.services.taxonomy_store import TaxonomyStore
from eventsync.services.translation_links import TranslationLinkService
from eventsync.services.location_sync import LocationSync, CapabilityDecision
from eventsync.services.recurrence_engine import RecurrenceEngine, RecurrenceSyncResult
from eventsync.services.translation_sync import TranslationSync
from eventsync.services.archive_query_planner import ArchiveQueryPlanner
from eventsync.services.grouping_engine import GroupingEngine, GroupedEvents
from eventsync.services.event_service import EventService, EventDate
from eventsync.services.save_pipeline import RecordSaveOrchestrator, SaveResult

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "InvalidDateFormatError",
    "DateEqualsOriginalError",
    "DuplicateDateError",
    "MissingPrerequisiteError",
    "WriteDeniedError",
    "TranslationCreateFailedError",
    "DateService",
    "FieldFilter",
    "GroupingClause",
    "QuerySpec",
    "QueryResult",
    "ProbeRow",
    "SaveContext",
    "ContentStore",
    "FieldStore",
    "TaxonomyStore",
    "TranslationLinkService",
    "LocationSync",
    "CapabilityDecision",
    "RecurrenceEngine",
    "RecurrenceSyncResult",
    "TranslationSync",
    "ArchiveQueryPlanner",
    "GroupingEngine",
    "GroupedEvents",
    "EventService",
    "EventDate",
    "RecordSaveOrchestrator",
    "SaveResult",
]
