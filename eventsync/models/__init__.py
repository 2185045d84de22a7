"""
SQLAlchemy models for the EventSync application.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Import all models here so they are registered with Base.metadata
# This is required for Alembic autogenerate to detect models
from eventsync.models.term import Term, record_terms
from eventsync.models.record import Record, RecordType, RecordStatus, VISIBLE_STATUSES
from eventsync.models.record_field import RecordField
from eventsync.models.fields import (
    EventFields,
    LocationFields,
    Taxonomies,
    MANAGED_FIELDS,
    translated_title_field,
)

__all__ = [
    "Base",
    "Term",
    "record_terms",
    "Record",
    "RecordType",
    "RecordStatus",
    "VISIBLE_STATUSES",
    "RecordField",
    "EventFields",
    "LocationFields",
    "Taxonomies",
    "MANAGED_FIELDS",
    "translated_title_field",
]
