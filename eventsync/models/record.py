"""
Record model: the single content-store table.

Events, recurrences and locations share one table and are told apart by
record_type. Type-specific data lives in RecordField rows (see
eventsync.models.fields for the field names) so that a recurrence can carry
a complete flat copy of its parent's values.

Design Rationale:
- Recurrences point at their parent event through parent_id; the foreign key
  cascades so a parent never leaves orphaned recurrences behind
- Translation peers share a term in the reserved "record_translations"
  taxonomy; the record's own language is a plain column
- status drives visibility: only published, scheduled and private records
  get recurrences, translations and location re-pushes
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Index
)
from sqlalchemy.orm import relationship

from eventsync.models import Base
from eventsync.models.mixins import GuidMixin
from eventsync.models.term import record_terms


class RecordType(enum.Enum):
    """Kinds of records kept in the content store."""
    EVENT = "event"
    RECURRENCE = "recurrence"
    LOCATION = "location"


class RecordStatus(enum.Enum):
    """Record lifecycle status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    PRIVATE = "private"
    TRASHED = "trashed"


VISIBLE_STATUSES = frozenset({
    RecordStatus.PUBLISHED.value,
    RecordStatus.SCHEDULED.value,
    RecordStatus.PRIVATE.value,
})


class Record(Base, GuidMixin):
    """
    Content-store record.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (evt_xxx, rec_xxx or loc_xxx)
        record_type: event, recurrence or location
        title: Display title
        slug: URL slug (unique per record type)
        status: draft, published, scheduled, private or trashed
        parent_id: Parent record (set for recurrences only)
        language: Language code of this copy (NULL when translations are off)
        published_at: Publication date, copied onto recurrences
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        parent: Parent event (many-to-one, CASCADE on delete)
        fields: Named field values (one-to-many, CASCADE on delete)
        terms: Taxonomy terms (many-to-many)
    """

    __tablename__ = "records"

    GUID_PREFIXES = {
        RecordType.EVENT.value: "evt",
        RecordType.RECURRENCE.value: "rec",
        RecordType.LOCATION.value: "loc",
    }

    id = Column(Integer, primary_key=True, autoincrement=True)

    record_type = Column(String(32), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="")
    slug = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RecordStatus.DRAFT.value, index=True)

    parent_id = Column(
        Integer,
        ForeignKey("records.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    language = Column(String(12), nullable=True, index=True)

    published_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    # Read-only: recurrences and field rows are written by id and removed
    # by the database cascades
    parent = relationship("Record", remote_side=[id], viewonly=True)
    fields = relationship("RecordField", viewonly=True)
    terms = relationship(
        "Term",
        secondary=record_terms,
        lazy="select",
    )

    __table_args__ = (
        Index("idx_records_type_status", "record_type", "status"),
        {"sqlite_autoincrement": True},
    )

    @property
    def guid_prefix(self) -> str:
        return self.GUID_PREFIXES.get(self.record_type, "evt")

    @property
    def is_visible(self) -> bool:
        """Check if the status counts as visible (published, scheduled, private)."""
        return self.status in VISIBLE_STATUSES

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Record("
            f"id={self.id}, "
            f"type='{self.record_type}', "
            f"title='{self.title}', "
            f"status='{self.status}'"
            f")>"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        return self.title
