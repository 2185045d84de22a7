"""
Unit tests for FieldStore.

Tests scalar and structured values, and the single-writer guard on the
denormalized location fields.
"""

import pytest

from eventsync.models import EventFields, RecordType
from eventsync.services.content_store import ContentStore
from eventsync.services.exceptions import WriteDeniedError
from eventsync.services.field_store import FieldStore


@pytest.fixture
def field_store(test_db_session):
    return FieldStore(test_db_session)


@pytest.fixture
def record(test_db_session):
    return ContentStore(test_db_session).create(RecordType.EVENT.value, title="Concert")


class TestFieldValues:
    """Tests for reading and writing values."""

    def test_scalar_round_trip(self, field_store, record):
        field_store.set_value(record, EventFields.DATE_AND_TIME, "2025-03-01 18:00:00")

        assert field_store.get_value(record, EventFields.DATE_AND_TIME) == "2025-03-01 18:00:00"

    def test_scalars_are_stored_as_text(self, field_store, record):
        field_store.set_value(record, EventFields.LOCATION_ID, 42)

        assert field_store.get_value(record, EventFields.LOCATION_ID) == "42"

    def test_list_value_is_stored_as_json(self, field_store, record):
        rows = [{"date_and_time": "2025-03-03 18:00:00"}]
        field_store.set_value(record, EventFields.FURTHER_DATES, rows)

        assert field_store.get_value(record, EventFields.FURTHER_DATES) == rows

    def test_missing_value_returns_default(self, field_store, record):
        assert field_store.get_value(record, EventFields.DURATION) is None
        assert field_store.get_value(record, EventFields.DURATION, "0:00") == "0:00"

    def test_overwrite_replaces_value(self, field_store, record):
        field_store.set_value(record, EventFields.DURATION, "1:00")
        field_store.set_value(record, EventFields.DURATION, "2:00")

        assert field_store.get_value(record, EventFields.DURATION) == "2:00"

    def test_none_clears_value(self, field_store, record):
        field_store.set_value(record, EventFields.DURATION, "1:00")
        field_store.set_value(record, EventFields.DURATION, None)

        assert field_store.get_value(record, EventFields.DURATION) is None

    def test_accepts_record_id(self, field_store, record):
        field_store.set_value(record.id, EventFields.DURATION, "1:00")

        assert field_store.get_value(record.id, EventFields.DURATION) == "1:00"

    def test_get_values(self, field_store, record):
        field_store.set_values(record, {
            EventFields.DATE_AND_TIME: "2025-03-01 18:00:00",
            EventFields.FURTHER_DATES: [],
        })

        assert field_store.get_values(record) == {
            EventFields.DATE_AND_TIME: "2025-03-01 18:00:00",
            EventFields.FURTHER_DATES: [],
        }

    def test_get_values_for(self, test_db_session, field_store, record):
        other = ContentStore(test_db_session).create(RecordType.EVENT.value, title="Other")
        field_store.set_value(record, EventFields.DATE_AND_TIME, "2025-03-01 18:00:00")
        field_store.set_value(other, EventFields.DATE_AND_TIME, "2025-03-02 18:00:00")

        values = field_store.get_values_for([record.id, other.id], EventFields.DATE_AND_TIME)

        assert values == {record.id: "2025-03-01 18:00:00", other.id: "2025-03-02 18:00:00"}
        assert field_store.get_values_for([], EventFields.DATE_AND_TIME) == {}

    def test_delete_value(self, field_store, record):
        field_store.set_value(record, EventFields.DURATION, "1:00")

        assert field_store.delete_value(record, EventFields.DURATION) is True
        assert field_store.delete_value(record, EventFields.DURATION) is False
        assert field_store.get_value(record, EventFields.DURATION) is None


class TestManagedFields:
    """Tests for the single-writer guard."""

    def test_external_write_is_denied(self, field_store, record):
        with pytest.raises(WriteDeniedError) as exc_info:
            field_store.set_value(record, EventFields.LOCATION_NAME, "Hall B")

        assert exc_info.value.field == EventFields.LOCATION_NAME
        assert exc_info.value.owner == "location_sync"

    def test_denied_write_keeps_value(self, field_store, record):
        field_store.set_value(record, EventFields.LOCATION_NAME, "Hall A", writer="location_sync")

        with pytest.raises(WriteDeniedError):
            field_store.set_value(record, EventFields.LOCATION_NAME, "Hall B")

        assert field_store.get_value(record, EventFields.LOCATION_NAME) == "Hall A"

    def test_owner_can_write(self, field_store, record):
        field_store.set_value(record, EventFields.LOCATION_SORT_NAME, "A", writer="location_sync")

        assert field_store.get_value(record, EventFields.LOCATION_SORT_NAME) == "A"

    def test_set_values_writes_nothing_when_one_is_denied(self, field_store, record):
        with pytest.raises(WriteDeniedError):
            field_store.set_values(record, {
                EventFields.DURATION: "1:00",
                EventFields.LOCATION_NAME: "Hall B",
            })

        assert field_store.get_value(record, EventFields.DURATION) is None

    def test_delete_of_managed_field_is_denied(self, field_store, record):
        field_store.set_value(record, EventFields.LOCATION_NAME, "Hall A", writer="location_sync")

        with pytest.raises(WriteDeniedError):
            field_store.delete_value(record, EventFields.LOCATION_NAME)

    def test_custom_managed_fields(self, test_db_session, record):
        store = FieldStore(test_db_session, managed_fields={"ticket_link": "box_office"})

        store.set_value(record, EventFields.LOCATION_NAME, "free for all")
        with pytest.raises(WriteDeniedError):
            store.set_value(record, "ticket_link", "https://example.com")
