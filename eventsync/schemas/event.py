"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Event creation and update requests
- Single field writes
- Event API responses and event date listings

Design:
- GUIDs are exposed via guid property, never internal IDs
- Locations are referenced by GUID in requests (loc_xxx)
- Further dates are rows of {"date_and_time": "..."}; cross-row rules
  (unique, different from the event date) are enforced at service layer
- location_name and location_sort_name are read-only
"""

import enum
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator


# ============================================================================
# Enums
# ============================================================================


class RecordStatusEnum(str, enum.Enum):
    """Record status enumeration."""
    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    PRIVATE = "private"
    TRASHED = "trashed"


# ============================================================================
# Embedded Schemas
# ============================================================================


class FurtherDate(BaseModel):
    """One row of the further dates repeater."""

    date_and_time: str = Field(..., description="Date and time (YYYY-MM-DD HH:MM:SS)")

    @field_validator("date_and_time")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure the date is not just whitespace."""
        if not v.strip():
            raise ValueError("Date and time cannot be empty")
        return v.strip()


class FilterSummary(BaseModel):
    """Classification term embedded in event responses."""

    name: str
    slug: str

    model_config = {"from_attributes": True}


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating a new event.

    Required:
        title: Event title
        date_and_time: Primary date and time

    Example:
        >>> event = EventCreate(
        ...     title="Chamber Concert",
        ...     status="published",
        ...     date_and_time="2025-03-01 18:00:00",
        ...     further_dates=[{"date_and_time": "2025-03-03 18:00:00"}],
        ... )
    """

    title: str = Field(..., min_length=1, max_length=255)
    status: RecordStatusEnum = Field(default=RecordStatusEnum.DRAFT)
    date_and_time: str = Field(..., description="Primary date and time")
    duration: Optional[str] = Field(default=None, description="Duration as H:MM")
    location_guid: Optional[str] = Field(default=None, description="Location GUID (loc_xxx)")
    further_dates: List[FurtherDate] = Field(default_factory=list)
    quick_infos: Optional[str] = Field(default=None)
    external_link: Optional[str] = Field(default=None)
    ticket_link: Optional[str] = Field(default=None)
    filters: List[str] = Field(default_factory=list, description="Classification term names")
    language: Optional[str] = Field(default=None, max_length=12)

    @field_validator("title")
    @classmethod
    def validate_title_not_whitespace(cls, v: str) -> str:
        """Ensure title is not just whitespace."""
        if not v.strip():
            raise ValueError("Title cannot be empty or whitespace")
        return v.strip()

    @field_validator("status")
    @classmethod
    def validate_not_trashed(cls, v: RecordStatusEnum) -> RecordStatusEnum:
        """New events cannot start in the trash."""
        if v == RecordStatusEnum.TRASHED:
            raise ValueError("Use the trash endpoint to trash an event")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Chamber Concert",
                "status": "published",
                "date_and_time": "2025-03-01 18:00:00",
                "duration": "1:30",
                "location_guid": "loc_01hgw2bbg0000000000000001",
                "further_dates": [{"date_and_time": "2025-03-03 18:00:00"}],
                "filters": ["Concert"],
            }
        }
    }


class EventUpdate(BaseModel):
    """
    Schema for updating an event.

    All fields optional; only provided fields are updated. Sending
    location_guid as null clears the location.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[RecordStatusEnum] = Field(default=None)
    date_and_time: Optional[str] = Field(default=None)
    duration: Optional[str] = Field(default=None)
    location_guid: Optional[str] = Field(default=None)
    further_dates: Optional[List[FurtherDate]] = Field(default=None)
    quick_infos: Optional[str] = Field(default=None)
    external_link: Optional[str] = Field(default=None)
    ticket_link: Optional[str] = Field(default=None)
    filters: Optional[List[str]] = Field(default=None)

    @field_validator("status")
    @classmethod
    def validate_not_trashed(cls, v: Optional[RecordStatusEnum]) -> Optional[RecordStatusEnum]:
        if v == RecordStatusEnum.TRASHED:
            raise ValueError("Use the trash endpoint to trash an event")
        return v


class FieldWrite(BaseModel):
    """Schema for writing a single field value."""

    value: Any = Field(default=None, description="New value (null clears it)")


# ============================================================================
# Response Schemas
# ============================================================================


class EventResponse(BaseModel):
    """
    Schema for event and recurrence API responses.
    """

    guid: str = Field(..., description="Event GUID (evt_xxx) or recurrence GUID (rec_xxx)")
    record_type: str
    title: str
    slug: str
    status: str
    language: Optional[str] = None
    parent_guid: Optional[str] = Field(default=None, description="Parent event GUID for recurrences")

    date_and_time: Optional[str] = None
    duration: Optional[str] = None
    date_and_duration: Optional[str] = Field(default=None, description="Display string")
    further_dates: List[FurtherDate] = Field(default_factory=list)

    location_guid: Optional[str] = None
    location_name: Optional[str] = None
    location_sort_name: Optional[str] = None

    quick_infos: Optional[str] = None
    external_link: Optional[str] = None
    ticket_link: Optional[str] = None
    filters: List[FilterSummary] = Field(default_factory=list)

    permalink: str

    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "guid": "evt_01hgw2bbg0000000000000001",
                "record_type": "event",
                "title": "Chamber Concert",
                "slug": "chamber-concert",
                "status": "published",
                "date_and_time": "2025-03-01 18:00:00",
                "duration": "1:30",
                "date_and_duration": "01 March 2025, 18:00, 90 Minutes",
                "location_name": "Hall A",
                "location_sort_name": "Hall A",
                "permalink": "/event/chamber-concert",
            }
        },
    }


class EventSaveResponse(EventResponse):
    """Event response plus what the save pipeline did."""

    recurrence_guids: List[str] = Field(default_factory=list)
    translations: dict = Field(default_factory=dict, description="Language -> GUID")
    warnings: List[str] = Field(default_factory=list, description="Skipped further dates")


class EventDateResponse(BaseModel):
    """One date of an event series."""

    date: str = Field(..., description="W3C date-time")
    display: str = Field(..., description="Formatted date and time")
    guid: str = Field(..., description="Event or recurrence GUID")
    is_current: bool
