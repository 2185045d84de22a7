"""
Field store service for named per-record values.

Scalars are stored as text, lists and dicts as JSON. Managed fields have a
single designated writer: writes from anyone else are rejected with
WriteDeniedError and the stored value stays as it was.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Union

from sqlalchemy.orm import Session

from eventsync.models import MANAGED_FIELDS, Record, RecordField
from eventsync.services.exceptions import WriteDeniedError
from eventsync.utils.logging_config import get_logger


logger = get_logger("services")

RecordRef = Union[Record, int]


def _record_id(record: RecordRef) -> int:
    return record.id if isinstance(record, Record) else int(record)


class FieldStore:
    """
    Service for reading and writing record fields.

    Usage:
        >>> fields = FieldStore(db_session)
        >>> fields.set_value(event, "date_and_time", "2025-03-01 18:00:00")
        >>> fields.get_value(event, "date_and_time")
        '2025-03-01 18:00:00'
        >>> fields.set_value(event, "location_name", "Hall A")
        Traceback (most recent call last):
        WriteDeniedError: Blocked update of 'location_name': ...
    """

    def __init__(self, db: Session, managed_fields: Optional[Mapping[str, str]] = None):
        """
        Initialize field store.

        Args:
            db: SQLAlchemy database session
            managed_fields: Field name -> sole writer (default: MANAGED_FIELDS)
        """
        self.db = db
        self.managed_fields = dict(MANAGED_FIELDS if managed_fields is None else managed_fields)

    def is_managed(self, name: str) -> bool:
        return name in self.managed_fields

    def check_writable(self, names: Iterable[str], writer: Optional[str] = None) -> None:
        """
        Raise WriteDeniedError if any of the fields is managed by another writer.
        """
        for name in names:
            owner = self.managed_fields.get(name)
            if owner is not None and owner != writer:
                logger.warning(
                    "Blocked write to managed field",
                    extra={"field": name, "owner": owner, "writer": writer}
                )
                raise WriteDeniedError(name, owner)

    def get_value(self, record: RecordRef, name: str, default: Any = None) -> Any:
        """Get one field value, or default when it is not stored."""
        row = self._get_row(_record_id(record), name)
        if row is None:
            return default
        value = row.decoded
        return default if value is None else value

    def get_values(self, record: RecordRef) -> Dict[str, Any]:
        """Get every stored field of a record as a flat dict."""
        rows = (
            self.db.query(RecordField)
            .filter(RecordField.record_id == _record_id(record))
            .order_by(RecordField.name)
            .all()
        )
        return {row.name: row.decoded for row in rows}

    def get_values_for(self, record_ids: Iterable[int], name: str) -> Dict[int, Any]:
        """Get one field for many records in a single query: record ID -> value."""
        ids = list(record_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(RecordField)
            .filter(RecordField.record_id.in_(ids), RecordField.name == name)
            .all()
        )
        return {row.record_id: row.decoded for row in rows}

    def set_value(
        self,
        record: RecordRef,
        name: str,
        value: Any,
        writer: Optional[str] = None,
    ) -> None:
        """
        Write one field value.

        Args:
            record: Record or record ID
            name: Field name
            value: Scalar, list or dict (None clears the value)
            writer: Identity of the writer; must match the owner of managed fields

        Raises:
            WriteDeniedError: If the field is managed by another writer
        """
        self.check_writable([name], writer)
        self._write(_record_id(record), name, value)
        self.db.flush()

    def set_values(
        self,
        record: RecordRef,
        values: Mapping[str, Any],
        writer: Optional[str] = None,
    ) -> None:
        """
        Write several fields. Nothing is written if any of them is denied.
        """
        self.check_writable(values.keys(), writer)
        record_id = _record_id(record)
        for name, value in values.items():
            self._write(record_id, name, value)
        self.db.flush()

    def delete_value(self, record: RecordRef, name: str, writer: Optional[str] = None) -> bool:
        """
        Remove a stored field.

        Returns:
            True if a value was removed

        Raises:
            WriteDeniedError: If the field is managed by another writer
        """
        self.check_writable([name], writer)
        row = self._get_row(_record_id(record), name)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    def _get_row(self, record_id: int, name: str) -> Optional[RecordField]:
        return (
            self.db.query(RecordField)
            .filter(RecordField.record_id == record_id, RecordField.name == name)
            .first()
        )

    def _write(self, record_id: int, name: str, value: Any) -> None:
        row = self._get_row(record_id, name)
        if row is None:
            row = RecordField(record_id=record_id, name=name)
            self.db.add(row)

        if isinstance(value, (list, dict)):
            row.value = None
            row.value_json = value
        elif value is None:
            row.value = None
            row.value_json = None
        else:
            row.value = str(value)
            row.value_json = None
