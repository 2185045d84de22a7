"""
Integration tests for the events API endpoints.

Tests the full request/response cycle including the save pipeline,
error mapping and GUID handling.
"""

import pytest


def create_location(client, title="Hall A", **extra):
    response = client.post("/api/locations", json={"title": title, **extra})
    assert response.status_code == 201
    return response.json()


def create_event(client, **extra):
    payload = {
        "title": "Concert",
        "status": "published",
        "date_and_time": "2025-03-01 18:00:00",
    }
    payload.update(extra)
    response = client.post("/api/events", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "eventsync"


class TestCreateEvent:
    """Tests for POST /api/events."""

    def test_create_with_recurrences_and_location(self, test_client):
        hall = create_location(test_client)

        event = create_event(
            test_client,
            duration="1:30",
            location_guid=hall["guid"],
            further_dates=[
                {"date_and_time": "2025-03-03 18:00:00"},
                {"date_and_time": "2025-03-05 18:00:00"},
            ],
            filters=["Concert"],
        )

        assert event["guid"].startswith("evt_")
        assert event["record_type"] == "event"
        assert event["location_guid"] == hall["guid"]
        assert event["location_name"] == "Hall A"
        assert event["location_sort_name"] == "Hall A"
        assert event["date_and_duration"] == "01 March 2025, 18:00, 90 Minutes"
        assert event["permalink"] == "/event/concert"
        assert [f["slug"] for f in event["filters"]] == ["concert"]
        assert len(event["recurrence_guids"]) == 2
        assert all(guid.startswith("rec_") for guid in event["recurrence_guids"])
        assert event["created_at"].endswith("Z")

    def test_date_is_normalized(self, test_client):
        event = create_event(test_client, date_and_time="2025-03-01T18:00")

        assert event["date_and_time"] == "2025-03-01 18:00:00"

    def test_draft_has_no_recurrences(self, test_client):
        event = create_event(
            test_client,
            status="draft",
            further_dates=[{"date_and_time": "2025-03-03 18:00:00"}],
        )

        assert event["recurrence_guids"] == []

    def test_invalid_date_returns_422(self, test_client):
        response = test_client.post("/api/events", json={
            "title": "Concert",
            "date_and_time": "someday",
        })

        assert response.status_code == 422
        assert response.json()["field"] == "date_and_time"
        assert response.json()["detail"] == "Invalid date format: someday"

    def test_further_date_equal_to_event_date_returns_422(self, test_client):
        response = test_client.post("/api/events", json={
            "title": "Concert",
            "status": "published",
            "date_and_time": "2025-03-01 18:00:00",
            "further_dates": [{"date_and_time": "2025-03-01 18:00:00"}],
        })

        assert response.status_code == 422
        assert response.json()["field"] == "further_dates"
        assert "different from the original" in response.json()["detail"]

    def test_duplicate_further_dates_return_422(self, test_client):
        response = test_client.post("/api/events", json={
            "title": "Concert",
            "date_and_time": "2025-03-01 18:00:00",
            "further_dates": [
                {"date_and_time": "2025-03-03 18:00:00"},
                {"date_and_time": "2025-03-03 18:00:00"},
            ],
        })

        assert response.status_code == 422
        assert response.json()["detail"] == "Each date must be unique"

    def test_unknown_location_returns_422(self, test_client):
        response = test_client.post("/api/events", json={
            "title": "Concert",
            "date_and_time": "2025-03-01 18:00:00",
            "location_guid": "loc_00000000000000000000000000",
        })

        assert response.status_code == 422
        assert response.json()["field"] == "location_guid"

    def test_trashed_status_rejected(self, test_client):
        response = test_client.post("/api/events", json={
            "title": "Concert",
            "status": "trashed",
            "date_and_time": "2025-03-01 18:00:00",
        })

        assert response.status_code == 422


class TestGetEvent:
    """Tests for GET /api/events/{guid}."""

    def test_get_event(self, test_client):
        created = create_event(test_client)

        response = test_client.get(f"/api/events/{created['guid']}")

        assert response.status_code == 200
        assert response.json()["title"] == "Concert"

    def test_get_recurrence(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])
        recurrence_guid = created["recurrence_guids"][0]

        response = test_client.get(f"/api/events/{recurrence_guid}")

        assert response.status_code == 200
        data = response.json()
        assert data["record_type"] == "recurrence"
        assert data["parent_guid"] == created["guid"]
        assert data["date_and_time"] == "2025-03-03 18:00:00"
        assert data["permalink"].startswith("/event/concert?recurrence=")

    def test_get_location_guid_returns_404(self, test_client):
        hall = create_location(test_client)

        response = test_client.get(f"/api/events/{hall['guid']}")

        assert response.status_code == 404

    @pytest.mark.parametrize("guid", ["evt_00000000000000000000000000", "not-a-guid"])
    def test_unknown_guid_returns_404(self, test_client, guid):
        assert test_client.get(f"/api/events/{guid}").status_code == 404


class TestUpdateEvent:
    """Tests for PUT /api/events/{guid}."""

    def test_update_rebuilds_recurrences(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])

        response = test_client.put(f"/api/events/{created['guid']}", json={
            "further_dates": [
                {"date_and_time": "2025-03-07 18:00:00"},
                {"date_and_time": "2025-03-09 18:00:00"},
            ],
        })

        assert response.status_code == 200
        data = response.json()
        assert len(data["recurrence_guids"]) == 2
        assert created["recurrence_guids"][0] not in data["recurrence_guids"]
        assert test_client.get(f"/api/events/{created['recurrence_guids'][0]}").status_code == 404

    def test_clear_location(self, test_client):
        hall = create_location(test_client)
        created = create_event(test_client, location_guid=hall["guid"])

        response = test_client.put(f"/api/events/{created['guid']}", json={"location_guid": None})

        assert response.status_code == 200
        assert response.json()["location_guid"] is None
        assert response.json()["location_name"] == ""

    def test_recurrence_cannot_be_updated(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])

        response = test_client.put(
            f"/api/events/{created['recurrence_guids'][0]}", json={"title": "Changed"}
        )

        assert response.status_code == 404


class TestWriteField:
    """Tests for PUT /api/events/{guid}/fields/{name}."""

    def test_write_plain_field(self, test_client):
        created = create_event(test_client)

        response = test_client.put(
            f"/api/events/{created['guid']}/fields/ticket_link",
            json={"value": "https://tickets.example.com"},
        )

        assert response.status_code == 200
        assert response.json()["ticket_link"] == "https://tickets.example.com"

    def test_write_managed_field_returns_403(self, test_client):
        hall = create_location(test_client)
        created = create_event(test_client, location_guid=hall["guid"])

        response = test_client.put(
            f"/api/events/{created['guid']}/fields/location_name",
            json={"value": "Hall B"},
        )

        assert response.status_code == 403
        assert response.json()["field"] == "location_name"
        assert test_client.get(f"/api/events/{created['guid']}").json()["location_name"] == "Hall A"


class TestEventDates:
    """Tests for GET /api/events/{guid}/dates."""

    def test_dates(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])

        response = test_client.get(f"/api/events/{created['guid']}/dates")

        assert response.status_code == 200
        dates = response.json()
        assert [d["date"] for d in dates] == [
            "2025-03-01T18:00:00+01:00",
            "2025-03-03T18:00:00+01:00",
        ]
        assert [d["is_current"] for d in dates] == [True, False]
        assert dates[0]["display"] == "01 March 2025, 18:00"

    def test_dates_with_current_recurrence(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])
        recurrence_guid = created["recurrence_guids"][0]

        dates = test_client.get(
            f"/api/events/{created['guid']}/dates", params={"recurrence": recurrence_guid}
        ).json()

        assert [d["is_current"] for d in dates] == [False, True]
        assert dates[1]["guid"] == recurrence_guid

    def test_unknown_recurrence_returns_422(self, test_client):
        created = create_event(test_client)

        response = test_client.get(
            f"/api/events/{created['guid']}/dates", params={"recurrence": "bogus"}
        )

        assert response.status_code == 422


class TestLifecycle:
    """Tests for trash, restore and delete."""

    def test_trash_and_restore(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])

        trashed = test_client.post(f"/api/events/{created['guid']}/trash")
        assert trashed.status_code == 200
        assert trashed.json()["status"] == "trashed"
        assert test_client.get(f"/api/events/{created['recurrence_guids'][0]}").status_code == 404

        restored = test_client.post(f"/api/events/{created['guid']}/restore", params={"publish": True})
        assert restored.status_code == 200
        assert restored.json()["status"] == "published"
        assert len(restored.json()["recurrence_guids"]) == 1

    def test_restore_as_draft(self, test_client):
        created = create_event(test_client)
        test_client.post(f"/api/events/{created['guid']}/trash")

        restored = test_client.post(f"/api/events/{created['guid']}/restore")

        assert restored.json()["status"] == "draft"
        assert restored.json()["recurrence_guids"] == []

    def test_delete(self, test_client):
        created = create_event(test_client, further_dates=[{"date_and_time": "2025-03-03 18:00:00"}])

        response = test_client.delete(f"/api/events/{created['guid']}")

        assert response.status_code == 204
        assert test_client.get(f"/api/events/{created['guid']}").status_code == 404
        assert test_client.get(f"/api/events/{created['recurrence_guids'][0]}").status_code == 404
