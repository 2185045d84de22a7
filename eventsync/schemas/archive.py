"""
Pydantic schemas for the event archive.

The calendar and locations views return groups; the default view returns a
flat list of events. Pagination counts groups for grouped views.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ArchiveEvent(BaseModel):
    """Event or recurrence in an archive listing."""

    guid: str
    title: str
    date_and_time: Optional[str] = None
    date_and_duration: Optional[str] = None
    location_name: Optional[str] = None
    permalink: str


class ArchiveGroup(BaseModel):
    """One bucket: a day or a location."""

    title: str
    events: List[ArchiveEvent] = Field(default_factory=list)


class ArchiveResponse(BaseModel):
    """
    Schema for one archive page.

    Example:
        {
          "view": "calendar",
          "page": 1,
          "page_size": 6,
          "total": 9,
          "max_pages": 2,
          "groups": [{"title": "Today, 01. March 2025", "events": [...]}],
          "events": []
        }
    """

    view: Optional[str] = Field(default=None, description="calendar, locations or null")
    page: int
    page_size: Optional[int] = None
    total: int = Field(..., description="Total groups (grouped views) or events")
    max_pages: int
    groups: List[ArchiveGroup] = Field(default_factory=list)
    events: List[ArchiveEvent] = Field(default_factory=list)
