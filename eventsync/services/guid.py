"""
GUID service for record identification.

GUID Format: {prefix}_{base32_uuid}
- prefix: record kind (evt, rec, loc)
- base32_uuid: 26-character Crockford Base32 encoded UUIDv7
"""

import re
import uuid
from typing import Optional, Tuple

from uuid_extensions import uuid7

from eventsync.models.mixins.guid import decode_base32, encode_guid

RECORD_PREFIXES = {
    "evt": "Event",
    "rec": "Recurrence",
    "loc": "Location",
}

GUID_PATTERN = re.compile(
    r"^(evt|rec|loc)_[0-9A-HJKMNP-TV-Za-hjkmnp-tv-z]{26}$",
    re.IGNORECASE
)


class GuidService:
    """Static helpers to generate, encode, decode and validate GUIDs."""

    @staticmethod
    def generate_uuid() -> uuid.UUID:
        return uuid7()

    @staticmethod
    def encode_uuid(uuid_value: uuid.UUID, prefix: str) -> str:
        """
        Encode a UUID to a GUID string.

        Raises:
            ValueError: If prefix is not a record kind prefix
        """
        if prefix not in RECORD_PREFIXES:
            raise ValueError(
                f"Invalid prefix '{prefix}'. "
                f"Valid prefixes: {', '.join(RECORD_PREFIXES)}"
            )
        return encode_guid(prefix, uuid_value)

    @staticmethod
    def decode_guid(guid: str) -> Tuple[str, uuid.UUID]:
        """
        Split a GUID into its prefix and UUID.

        Raises:
            ValueError: If the GUID is empty or malformed
        """
        if not GuidService.validate_guid(guid):
            raise ValueError(f"Invalid GUID format: {guid!r}")
        prefix, encoded = guid.split("_", 1)
        return prefix.lower(), decode_base32(encoded)

    @staticmethod
    def validate_guid(guid: Optional[str], expected_prefix: Optional[str] = None) -> bool:
        """Check the GUID format, and the prefix when one is expected."""
        if not guid or not GUID_PATTERN.match(guid):
            return False
        if expected_prefix:
            return guid[:3].lower() == expected_prefix.lower()
        return True
