"""
Pydantic schemas for location API request/response validation.

Design:
- GUIDs are exposed via guid property, never internal IDs
- sort_name falls back to the title when empty
- Deletion protection (referenced by events) is enforced at service layer
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from eventsync.schemas.event import RecordStatusEnum


class LocationCreate(BaseModel):
    """
    Schema for creating a new location.

    Example:
        >>> location = LocationCreate(title="Hall A", status="published")
    """

    title: str = Field(..., min_length=1, max_length=255)
    status: RecordStatusEnum = Field(default=RecordStatusEnum.PUBLISHED)
    sort_name: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    area: Optional[str] = Field(default=None, max_length=255)
    tel: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=500)
    maps_url: Optional[str] = Field(default=None, max_length=500)
    language: Optional[str] = Field(default=None, max_length=12)

    @field_validator("title")
    @classmethod
    def validate_title_not_whitespace(cls, v: str) -> str:
        """Ensure title is not just whitespace."""
        if not v.strip():
            raise ValueError("Title cannot be empty or whitespace")
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Hall A",
                "status": "published",
                "sort_name": "Hall A",
                "address": "Main Street 1",
            }
        }
    }


class LocationUpdate(BaseModel):
    """
    Schema for updating a location.

    All fields optional; only provided fields are updated. Renaming a
    visible location updates every event referencing it.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[RecordStatusEnum] = Field(default=None)
    sort_name: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    area: Optional[str] = Field(default=None, max_length=255)
    tel: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=500)
    maps_url: Optional[str] = Field(default=None, max_length=500)


class LocationResponse(BaseModel):
    """Schema for location API responses."""

    guid: str = Field(..., description="Location GUID (loc_xxx)")
    title: str
    slug: str
    status: str
    language: Optional[str] = None
    sort_name: Optional[str] = None
    address: Optional[str] = None
    area: Optional[str] = None
    tel: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    maps_url: Optional[str] = None
    events_updated: int = Field(default=0, description="Events re-synced by this save")
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {"from_attributes": True}


class LocationEventSummary(BaseModel):
    """Event attached to a location."""

    guid: str
    title: str
    status: str
    date_and_time: Optional[str] = None


class LocationEventsResponse(BaseModel):
    """Events and recurrences referencing a location."""

    location_guid: str
    events: List[LocationEventSummary] = Field(default_factory=list)
