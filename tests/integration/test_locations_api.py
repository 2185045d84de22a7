"""
Integration tests for the locations API endpoints.

Tests renaming a location (pushed onto events and recurrences) and the
delete guard for referenced locations.
"""


def create_location(client, title="Hall A", **extra):
    response = client.post("/api/locations", json={"title": title, **extra})
    assert response.status_code == 201
    return response.json()


def create_event(client, location_guid, **extra):
    payload = {
        "title": "Concert",
        "status": "published",
        "date_and_time": "2025-03-01 18:00:00",
        "location_guid": location_guid,
    }
    payload.update(extra)
    response = client.post("/api/events", json=payload)
    assert response.status_code == 201
    return response.json()


class TestLocationCrud:
    """Tests for create, get and update."""

    def test_create_location(self, test_client):
        location = create_location(test_client, sort_name="A, Hall", address="Main Street 1")

        assert location["guid"].startswith("loc_")
        assert location["status"] == "published"
        assert location["sort_name"] == "A, Hall"
        assert location["address"] == "Main Street 1"

    def test_get_location(self, test_client):
        created = create_location(test_client)

        response = test_client.get(f"/api/locations/{created['guid']}")

        assert response.status_code == 200
        assert response.json()["title"] == "Hall A"

    def test_get_event_guid_returns_404(self, test_client):
        hall = create_location(test_client)
        event = create_event(test_client, hall["guid"])

        assert test_client.get(f"/api/locations/{event['guid']}").status_code == 404

    def test_empty_title_returns_422(self, test_client):
        response = test_client.post("/api/locations", json={"title": "   "})

        assert response.status_code == 422


class TestRename:
    """Tests for pushing a renamed location onto its events."""

    def test_rename_updates_events_and_recurrences(self, test_client):
        hall = create_location(test_client)
        event = create_event(
            test_client, hall["guid"], further_dates=[{"date_and_time": "2025-03-03 18:00:00"}]
        )

        response = test_client.put(f"/api/locations/{hall['guid']}", json={"title": "Hall B"})

        assert response.status_code == 200
        assert response.json()["events_updated"] == 2
        assert test_client.get(f"/api/events/{event['guid']}").json()["location_name"] == "Hall B"
        recurrence = test_client.get(f"/api/events/{event['recurrence_guids'][0]}").json()
        assert recurrence["location_name"] == "Hall B"

    def test_sort_name_update(self, test_client):
        hall = create_location(test_client)
        event = create_event(test_client, hall["guid"])

        test_client.put(f"/api/locations/{hall['guid']}", json={"sort_name": "A, Hall"})

        data = test_client.get(f"/api/events/{event['guid']}").json()
        assert data["location_name"] == "Hall A"
        assert data["location_sort_name"] == "A, Hall"


class TestLocationEvents:
    """Tests for GET /api/locations/{guid}/events."""

    def test_list_events(self, test_client):
        hall = create_location(test_client)
        event = create_event(
            test_client, hall["guid"], further_dates=[{"date_and_time": "2025-03-03 18:00:00"}]
        )

        response = test_client.get(f"/api/locations/{hall['guid']}/events")

        assert response.status_code == 200
        data = response.json()
        assert data["location_guid"] == hall["guid"]
        assert [e["guid"] for e in data["events"]] == [event["guid"], event["recurrence_guids"][0]]


class TestDeleteLocation:
    """Tests for DELETE /api/locations/{guid}."""

    def test_referenced_location_returns_409(self, test_client):
        hall = create_location(test_client)
        create_event(test_client, hall["guid"])

        response = test_client.delete(f"/api/locations/{hall['guid']}")

        assert response.status_code == 409
        assert "1 event(s)" in response.json()["detail"]
        assert test_client.get(f"/api/locations/{hall['guid']}").status_code == 200

    def test_delete_unused_location(self, test_client):
        hall = create_location(test_client)

        response = test_client.delete(f"/api/locations/{hall['guid']}")

        assert response.status_code == 204
        assert test_client.get(f"/api/locations/{hall['guid']}").status_code == 404

    def test_delete_after_event_trashed(self, test_client):
        hall = create_location(test_client)
        event = create_event(test_client, hall["guid"])
        test_client.post(f"/api/events/{event['guid']}/trash")

        response = test_client.delete(f"/api/locations/{hall['guid']}")

        assert response.status_code == 204
