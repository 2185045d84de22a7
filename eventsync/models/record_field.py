"""
RecordField model: one named value of one record.

Scalars are stored as text in ``value`` so that listing queries can filter,
sort and group on them directly (canonical date-times sort lexically).
Lists and dicts, such as the further-dates repeater rows, are stored in
``value_json``.
"""

from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from eventsync.models import Base
from eventsync.models.types import JSONBType


class RecordField(Base):
    """
    Named field value attached to a record.

    Attributes:
        id: Primary key
        record_id: Owning record (CASCADE on delete)
        name: Field name (see eventsync.models.fields)
        value: Text value for scalars (NULL when value_json is used)
        value_json: Structured value for lists and dicts

    Constraints:
        - one value per (record_id, name)
    """

    __tablename__ = "record_fields"

    id = Column(Integer, primary_key=True, autoincrement=True)

    record_id = Column(
        Integer,
        ForeignKey("records.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False)
    value = Column(Text, nullable=True)
    value_json = Column(JSONBType, nullable=True)

    record = relationship("Record", viewonly=True)

    __table_args__ = (
        UniqueConstraint("record_id", "name", name="uq_record_fields_record_name"),
        Index("idx_record_fields_name", "name"),
        {"sqlite_autoincrement": True},
    )

    @property
    def decoded(self):
        """Return the stored value in its original shape."""
        if self.value_json is not None:
            return self.value_json
        return self.value

    def __repr__(self) -> str:
        return f"<RecordField(record_id={self.record_id}, name='{self.name}')>"
