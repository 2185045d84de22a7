"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from eventsync.schemas.event import (
    RecordStatusEnum,
    FurtherDate,
    FilterSummary,
    EventCreate,
    EventUpdate,
    FieldWrite,
    EventResponse,
    EventSaveResponse,
    EventDateResponse,
)
from eventsync.schemas.location import (
    LocationCreate,
    LocationUpdate,
    LocationResponse,
    LocationEventSummary,
    LocationEventsResponse,
)
from eventsync.schemas.archive import (
    ArchiveEvent,
    ArchiveGroup,
    ArchiveResponse,
)

__all__ = [
    "RecordStatusEnum",
    "FurtherDate",
    "FilterSummary",
    "EventCreate",
    "EventUpdate",
    "FieldWrite",
    "EventResponse",
    "EventSaveResponse",
    "EventDateResponse",
    "LocationCreate",
    "LocationUpdate",
    "LocationResponse",
    "LocationEventSummary",
    "LocationEventsResponse",
    "ArchiveEvent",
    "ArchiveGroup",
    "ArchiveResponse",
]
