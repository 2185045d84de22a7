"""
Term model for hierarchical taxonomies attached to records.

Two taxonomies are used by the engine:
- event_filter: classification tags shown as archive filters
- record_translations: one term per group of translation peers (reserved,
  never copied onto clones or recurrences)
"""

from sqlalchemy import (
    Column, Integer, String, ForeignKey, Table, UniqueConstraint
)
from sqlalchemy.orm import relationship

from eventsync.models import Base


record_terms = Table(
    "record_terms",
    Base.metadata,
    Column("record_id", Integer, ForeignKey("records.id", ondelete="CASCADE"), primary_key=True),
    Column("term_id", Integer, ForeignKey("terms.id", ondelete="CASCADE"), primary_key=True),
)


class Term(Base):
    """
    Taxonomy term.

    Attributes:
        id: Primary key
        taxonomy: Taxonomy name (event_filter, record_translations, ...)
        name: Display name
        slug: URL slug, unique within the taxonomy
        parent_id: Parent term for hierarchical taxonomies

    Relationships:
        parent: Parent term (many-to-one, SET NULL on delete)
    """

    __tablename__ = "terms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    taxonomy = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    parent_id = Column(
        Integer,
        ForeignKey("terms.id", ondelete="SET NULL"),
        nullable=True
    )

    parent = relationship("Term", remote_side=[id])

    __table_args__ = (
        UniqueConstraint("taxonomy", "slug", name="uq_terms_taxonomy_slug"),
    )

    def __repr__(self) -> str:
        return f"<Term(id={self.id}, taxonomy='{self.taxonomy}', slug='{self.slug}')>"
