"""
Content store service: records, type registry and the listing-query executor.

Provides record CRUD, the record-kind predicates used by every other service
and the executor for QuerySpec listings (filters, ordering, pagination and
grouped probe queries).

Design:
- Record types must be registered before records of that type are created
- Slugs are unique per record type; collisions get a numeric suffix
- Field filters and sort keys join one RecordField alias per field name
- The "day" grouping column is substr(value, 1, 10) of the canonical
  date_and_time value, which works the same on SQLite and PostgreSQL
"""

import re
import unicodedata
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy import and_, asc, desc, func, or_
from sqlalchemy.orm import Session, aliased

from eventsync.models import (
    EventFields,
    Record,
    RecordField,
    RecordStatus,
    RecordType,
    Taxonomies,
    Term,
    VISIBLE_STATUSES,
)
from eventsync.services.exceptions import NotFoundError, ValidationError
from eventsync.services.guid import GuidService
from eventsync.services.query import FieldFilter, ProbeRow, QueryResult, QuerySpec
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")

RecordRef = Union[Record, int, None]

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")

# Record attributes that update() may change
UPDATABLE_ATTRIBUTES = ("title", "slug", "status", "language", "published_at")

# Grouping column -> field it is derived from
GROUPING_SOURCES = {
    "day": EventFields.DATE_AND_TIME,
    "location_name": EventFields.LOCATION_NAME,
    "location_sort_name": EventFields.LOCATION_SORT_NAME,
}


def slugify(text: str) -> str:
    """Lowercase ASCII slug, e.g. "Café Müller" -> "cafe-muller"."""
    normalized = unicodedata.normalize("NFKD", text or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    return _SLUG_STRIP.sub("-", ascii_text).strip("-")


class ContentStore:
    """
    Service for records of every registered type.

    Usage:
        >>> store = ContentStore(db_session)
        >>> location = store.create("location", title="Hall A", status="published")
        >>> store.is_location(location)
        True
    """

    DEFAULT_TYPES = (RecordType.EVENT.value, RecordType.LOCATION.value)

    def __init__(self, db: Session, record_types: Optional[Iterable[str]] = None):
        """
        Initialize content store.

        Args:
            db: SQLAlchemy database session
            record_types: Initially registered types (default: event, location)
        """
        self.db = db
        self._types = set(self.DEFAULT_TYPES if record_types is None else record_types)

    # ------------------------------------------------------------------
    # Type registry
    # ------------------------------------------------------------------

    def register_type(self, record_type: str) -> None:
        """Register a record type. Registering twice is a no-op."""
        if record_type not in self._types:
            self._types.add(record_type)
            logger.debug("Registered record type", extra={"record_type": record_type})

    def type_exists(self, record_type: str) -> bool:
        return record_type in self._types

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def find(self, record: RecordRef) -> Optional[Record]:
        """Resolve a record or record ID; None when it does not exist."""
        if record is None:
            return None
        if isinstance(record, Record):
            return record
        return self.db.query(Record).filter(Record.id == int(record)).first()

    def get(self, record_id: int) -> Record:
        """
        Get a record by internal ID.

        Raises:
            NotFoundError: If the record does not exist
        """
        record = self.find(record_id)
        if not record:
            raise NotFoundError("Record", record_id)
        return record

    def get_by_guid(self, guid: str, record_type: Optional[str] = None) -> Record:
        """
        Get a record by GUID (evt_xxx, rec_xxx or loc_xxx).

        Args:
            guid: GUID string
            record_type: Optional record type the GUID must belong to

        Raises:
            NotFoundError: If the GUID is malformed, of the wrong type or unknown
        """
        try:
            prefix, uuid_value = GuidService.decode_guid(guid)
        except ValueError:
            raise NotFoundError("Record", guid)

        if record_type and Record.GUID_PREFIXES.get(record_type) != prefix:
            raise NotFoundError(record_type.capitalize(), guid)

        record = self.db.query(Record).filter(Record.uuid == uuid_value).first()
        if not record or record.guid_prefix != prefix:
            raise NotFoundError("Record", guid)
        return record

    def create(
        self,
        record_type: str,
        title: str,
        status: str = RecordStatus.DRAFT.value,
        slug: Optional[str] = None,
        parent_id: Optional[int] = None,
        language: Optional[str] = None,
        published_at: Optional[datetime] = None,
    ) -> Record:
        """
        Create a record.

        Args:
            record_type: Registered record type
            title: Display title
            status: Initial status
            slug: Desired slug (derived from the title when omitted)
            parent_id: Parent record (recurrences only)
            language: Language code of this copy
            published_at: Publication date (defaults to now)

        Returns:
            Created Record (flushed, so it has an ID)

        Raises:
            ValidationError: If the type is not registered or the status unknown
        """
        if not self.type_exists(record_type):
            raise ValidationError(f"Unknown record type: {record_type}", field="record_type")
        self._check_status(status)

        record = Record(
            record_type=record_type,
            title=title or "",
            status=status,
            slug=self.unique_slug(record_type, slug or slugify(title)),
            parent_id=parent_id,
            language=language,
        )
        if published_at is not None:
            record.published_at = published_at

        self.db.add(record)
        self.db.flush()

        logger.info(
            "Created record",
            extra={"record_id": record.id, "record_type": record_type, "status": status}
        )
        return record

    def update(self, record: Record, **changes) -> Record:
        """
        Update record attributes (title, slug, status, language, published_at).

        Raises:
            ValidationError: If an attribute is not updatable or the status unknown
        """
        for name, value in changes.items():
            if name not in UPDATABLE_ATTRIBUTES:
                raise ValidationError(f"Attribute cannot be updated: {name}", field=name)
            if name == "status":
                self._check_status(value)
            if name == "slug":
                value = self.unique_slug(record.record_type, value, exclude_id=record.id)
            setattr(record, name, value)

        self.db.flush()
        return record

    def delete(self, record: Record) -> None:
        """Delete a record with its fields and term links.

        Recurrences of an event are removed by the parent_id cascade; callers
        that hold them in the session should delete them first.
        """
        record_id = record.id
        self.db.query(RecordField).filter(
            RecordField.record_id == record_id
        ).delete(synchronize_session="fetch")
        self.db.delete(record)
        self.db.flush()
        logger.info("Deleted record", extra={"record_id": record_id})

    def unique_slug(
        self,
        record_type: str,
        base: str,
        exclude_id: Optional[int] = None,
    ) -> str:
        """Return base, or base-2, base-3, ... if already taken for this type."""
        base = base or "record"
        candidate = base
        suffix = 2
        while True:
            query = self.db.query(Record.id).filter(
                Record.record_type == record_type,
                Record.slug == candidate,
            )
            if exclude_id is not None:
                query = query.filter(Record.id != exclude_id)
            if query.first() is None:
                return candidate
            candidate = f"{base}-{suffix}"
            suffix += 1

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_event(self, record: RecordRef) -> bool:
        """True for original events and recurrences."""
        record = self.find(record)
        return record is not None and record.record_type in (
            RecordType.EVENT.value, RecordType.RECURRENCE.value
        )

    def is_original_event(self, record: RecordRef) -> bool:
        record = self.find(record)
        return record is not None and record.record_type == RecordType.EVENT.value

    def is_recurrence(self, record: RecordRef) -> bool:
        record = self.find(record)
        return record is not None and record.record_type == RecordType.RECURRENCE.value

    def is_location(self, record: RecordRef) -> bool:
        record = self.find(record)
        return record is not None and record.record_type == RecordType.LOCATION.value

    def is_visible_status(self, record: RecordRef) -> bool:
        record = self.find(record)
        return record is not None and record.status in VISIBLE_STATUSES

    # ------------------------------------------------------------------
    # Listing queries
    # ------------------------------------------------------------------

    def query(self, spec: QuerySpec) -> QueryResult:
        """
        Execute a listing query.

        Plain queries return Records; queries with a grouping clause return
        one ProbeRow per bucket. Pagination applies to whichever is returned,
        so a grouped page holds page_size buckets.
        """
        aliases: Dict[str, type] = {}
        query = self.db.query(Record)

        def field_alias(name: str):
            nonlocal query
            if name not in aliases:
                alias = aliased(RecordField)
                query = query.join(
                    alias,
                    and_(alias.record_id == Record.id, alias.name == name)
                )
                aliases[name] = alias
            return aliases[name]

        query = query.filter(
            Record.record_type.in_(spec.record_types),
            Record.status.in_(spec.statuses),
        )
        if spec.language:
            query = query.filter(Record.language == spec.language)
        if spec.filter_term:
            query = query.filter(Record.terms.any(and_(
                Term.taxonomy == Taxonomies.EVENT_FILTER,
                Term.slug == spec.filter_term,
            )))
        if spec.search:
            query = query.filter(self._search_condition(spec.search))

        for field_filter in spec.filters.values():
            alias = field_alias(field_filter.field)
            condition = self._filter_condition(alias, field_filter)
            if condition is not None:
                query = query.filter(condition)

        if spec.is_grouped:
            for name in spec.clauses.fields + (spec.clauses.group_by,):
                field_alias(GROUPING_SOURCES[name])
            return self._run_grouped(query, spec, aliases)

        for name, direction in spec.order_by:
            column = field_alias(name).value
            query = query.order_by(desc(column) if direction.lower() == "desc" else asc(column))
        query = query.order_by(Record.id.asc())

        total = query.order_by(None).count()
        if spec.page_size:
            query = query.offset((max(spec.page, 1) - 1) * spec.page_size).limit(spec.page_size)

        return QueryResult(
            items=query.all(),
            total=total,
            page=spec.page,
            page_size=spec.page_size,
        )

    def _run_grouped(self, query, spec: QuerySpec, aliases: Dict[str, type]) -> QueryResult:
        clause = spec.clauses

        def expression(name: str):
            column = aliases[GROUPING_SOURCES[name]].value
            return func.substr(column, 1, 10) if name == "day" else column

        group_column = expression(clause.group_by)
        columns = [
            (group_column if name == clause.group_by else func.min(expression(name))).label(name)
            for name in clause.fields
        ]
        if clause.group_by not in clause.fields:
            columns.append(group_column.label(clause.group_by))

        grouped = (
            query.with_entities(*columns)
            .group_by(group_column)
            .order_by(group_column.asc())
        )
        total = grouped.order_by(None).count()
        if spec.page_size:
            grouped = grouped.offset((max(spec.page, 1) - 1) * spec.page_size).limit(spec.page_size)

        rows = [
            ProbeRow(**{name: getattr(row, name) for name in row._fields})
            for row in grouped.all()
        ]
        return QueryResult(items=rows, total=total, page=spec.page, page_size=spec.page_size)

    @staticmethod
    def _filter_condition(alias, field_filter: FieldFilter):
        if field_filter.cast == "DATE":
            column = func.substr(alias.value, 1, 10)
            value = field_filter.value
            if isinstance(value, (list, tuple)):
                value = tuple(str(v)[:10] for v in value)
            elif value is not None:
                value = str(value)[:10]
        else:
            column = alias.value
            value = field_filter.value
            if isinstance(value, (list, tuple)):
                value = tuple(str(v) for v in value)
            elif value is not None:
                value = str(value)

        compare = field_filter.compare
        if compare == "EXISTS":
            # Present means stored and non-empty
            return and_(alias.value.isnot(None), alias.value != "")
        if compare == "BETWEEN":
            return column.between(value[0], value[1])
        if compare == "=":
            return column == value
        if compare == "!=":
            return column != value
        if compare == ">":
            return column > value
        if compare == ">=":
            return column >= value
        if compare == "<":
            return column < value
        return column <= value

    def _search_condition(self, search: str):
        pattern = f"%{search.strip()}%"
        location_match = (
            self.db.query(RecordField.id)
            .filter(
                RecordField.record_id == Record.id,
                RecordField.name == EventFields.LOCATION_NAME,
                RecordField.value.ilike(pattern),
            )
            .exists()
        )
        return or_(Record.title.ilike(pattern), location_match)

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in {s.value for s in RecordStatus}:
            raise ValidationError(f"Unknown status: {status}", field="status")
