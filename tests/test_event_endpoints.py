"""Tests for event endpoints"""

from tests.config import EMAIL_FIELD_ID, NAME_FIELD_ID

ZAP_URL = "https://hooks.example.com/events"

EVENT_BODY = {
    "title": "Data Meetup",
    "description": "Monthly meetup",
    "date": "2025-06-01",
    "startTime": "19:00",
    "endTime": "21:00",
    "location": "Online",
    "capacity": 50,
}


def _subscribe(webhook_service, *events):
    webhook_service.create_webhook(
        {"name": "Zap", "url": ZAP_URL, "events": list(events)}
    )


class TestEventEndpoints:
    def test_list_events_includes_registration_counts(
        self, client, registration_service, sample_event
    ):
        registration_service.create_registration(
            sample_event.id, {NAME_FIELD_ID: "Ada", EMAIL_FIELD_ID: "ada@x.com"}
        )

        response = client.get("/api/events")

        assert response.status_code == 200
        events = response.json()
        assert len(events) == 1
        assert events[0]["title"] == "Python Workshop"
        assert events[0]["registration_count"] == 1

    def test_get_event(self, client, sample_event):
        response = client.get(f"/api/events/{sample_event.id}")

        assert response.status_code == 200
        assert response.json()["registration_count"] == 0

    def test_get_missing_event(self, client):
        response = client.get("/api/events/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found"

    def test_create_event_requires_admin(self, client):
        response = client.post("/api/events", json=EVENT_BODY)
        assert response.status_code == 401

    def test_create_event_dispatches_event_created(
        self, admin_client, webhook_service, webhook_receiver
    ):
        _subscribe(webhook_service, "event.created")

        response = admin_client.post("/api/events", json=EVENT_BODY)

        assert response.status_code == 201
        event = response.json()
        assert event["start_time"] == "19:00"
        assert event["form_id"] is None

        payload = webhook_receiver.payloads_to(ZAP_URL)[0]
        assert payload["id"] == event["id"]
        assert payload["title"] == "Data Meetup"
        assert payload["is_online"] is True
        assert payload["available_spots"] == 50
        assert payload["event_url"] == f"http://testserver/events/{event['id']}"

    def test_create_event_delivery_failure_does_not_fail_request(
        self, admin_client, webhook_service, webhook_receiver
    ):
        _subscribe(webhook_service, "event.created")
        webhook_receiver.fail(ZAP_URL)

        response = admin_client.post("/api/events", json=EVENT_BODY)

        assert response.status_code == 201

    def test_create_event_validation(self, admin_client):
        response = admin_client.post(
            "/api/events", json={**EVENT_BODY, "capacity": 0, "date": "June 1st"}
        )

        assert response.status_code == 400
        data = response.json()
        assert data["detail"] == "Validation error"
        failed = {tuple(error["loc"]) for error in data["errors"]}
        assert ("body", "capacity") in failed
        assert ("body", "date") in failed

    def test_update_event_dispatches_event_updated(
        self, admin_client, webhook_service, webhook_receiver, sample_event
    ):
        _subscribe(webhook_service, "event.updated")

        response = admin_client.put(
            f"/api/events/{sample_event.id}", json={"location": "Room 101"}
        )

        assert response.status_code == 200
        event = response.json()
        assert event["location"] == "Room 101"
        assert event["title"] == "Python Workshop"
        payload = webhook_receiver.payloads_to(ZAP_URL)[0]
        assert payload["location"] == "Room 101"

    def test_update_rejects_null_required_fields(
        self, admin_client, webhook_service, webhook_receiver, sample_event
    ):
        _subscribe(webhook_service, "event.updated")

        for body in ({"capacity": None}, {"title": None}, {"date": None}):
            response = admin_client.put(f"/api/events/{sample_event.id}", json=body)

            assert response.status_code == 400
            assert response.json()["detail"] == "Validation error"

        event = admin_client.get(f"/api/events/{sample_event.id}").json()
        assert event["capacity"] == 2
        assert event["title"] == "Python Workshop"
        assert webhook_receiver.requests == []

    def test_update_clears_optional_fields(self, admin_client, sample_event):
        response = admin_client.put(
            f"/api/events/{sample_event.id}", json={"description": None}
        )

        assert response.status_code == 200
        assert response.json()["description"] is None

    def test_update_missing_event(self, admin_client):
        response = admin_client.put("/api/events/999", json={"title": "Nope"})
        assert response.status_code == 404

    def test_delete_event(self, admin_client, sample_event, event_service):
        response = admin_client.delete(f"/api/events/{sample_event.id}")

        assert response.status_code == 204
        assert admin_client.get(f"/api/events/{sample_event.id}").status_code == 404

    def test_link_form(self, admin_client, event_service, sample_form):
        event = event_service.create_event(
            {"title": "Open Day", "date": "2025-05-01", "capacity": 10}
        )

        response = admin_client.post(f"/api/events/{event.id}/form/{sample_form.id}")

        assert response.status_code == 200
        assert response.json()["form_id"] == sample_form.id

    def test_link_missing_form(self, admin_client, sample_event):
        response = admin_client.post(f"/api/events/{sample_event.id}/form/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Form not found"

    def test_event_registrations(self, client, registration_service, sample_event):
        registration_service.create_registration(
            sample_event.id, {NAME_FIELD_ID: "Ada", EMAIL_FIELD_ID: "ada@x.com"}
        )

        response = client.get(f"/api/events/{sample_event.id}/registrations")

        assert response.status_code == 200
        assert [r["event_id"] for r in response.json()] == [sample_event.id]
