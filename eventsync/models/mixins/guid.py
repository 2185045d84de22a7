"""
GUID mixin for SQLAlchemy models.

Records keep a UUIDv7 (time-ordered) column; API clients only ever see it
as a GUID: a record-kind prefix plus the UUID in lower-case Crockford
Base32.

    evt_01hgw2bbg0000000000000000   event
    rec_01hgw2bbg0000000000000001   recurrence
    loc_01hgw2bbg0000000000000002   location
"""

import uuid as uuid_module
from typing import ClassVar, Optional

import base32_crockford
from sqlalchemy import Column, LargeBinary, TypeDecorator
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from uuid_extensions import uuid7

ENCODED_LENGTH = 26


def encode_guid(prefix: str, value) -> str:
    """Encode a UUID (or its 16 raw bytes) as {prefix}_{base32}."""
    raw = value if isinstance(value, bytes) else value.bytes
    encoded = base32_crockford.encode(int.from_bytes(raw, "big")).zfill(ENCODED_LENGTH)
    return f"{prefix}_{encoded.lower()}"


def decode_base32(encoded: str) -> uuid_module.UUID:
    """
    Decode the part after the prefix.

    Raises:
        ValueError: If the text is not 26 valid Base32 characters
    """
    if len(encoded) != ENCODED_LENGTH:
        raise ValueError(
            f"Invalid GUID length. Expected {ENCODED_LENGTH} characters after prefix, "
            f"got {len(encoded)}"
        )
    try:
        return uuid_module.UUID(bytes=base32_crockford.decode(encoded.upper()).to_bytes(16, "big"))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid GUID encoding: {e}")


class UUIDType(TypeDecorator):
    """
    UUID column: native UUID on PostgreSQL, 16 raw bytes elsewhere.

    Values always come back as uuid.UUID.
    """

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid_module.UUID):
            value = uuid_module.UUID(bytes=value) if isinstance(value, bytes) else uuid_module.UUID(str(value))
        return value if dialect.name == 'postgresql' else value.bytes

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid_module.UUID):
            return value
        if isinstance(value, bytes):
            return uuid_module.UUID(bytes=value)
        return uuid_module.UUID(str(value))


class GuidMixin:
    """
    Adds the uuid column and the guid property.

    The prefix comes from GUID_PREFIX, or from guid_prefix when one table
    holds several record kinds.
    """

    GUID_PREFIX: ClassVar[str]

    uuid = Column(
        UUIDType(),
        nullable=False,
        unique=True,
        index=True,
        default=uuid7,
    )

    @property
    def guid_prefix(self) -> str:
        return self.GUID_PREFIX

    @property
    def guid(self) -> Optional[str]:
        """GUID string, or None until the row has been flushed."""
        if self.uuid is None:
            return None
        return encode_guid(self.guid_prefix, self.uuid)
