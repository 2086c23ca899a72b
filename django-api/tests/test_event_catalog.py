"""Integration tests for the events API.

Requests go through the full DRF stack with the service factories pointed
at an in-memory store (see the `app_store` fixture).
Run with: pytest tests/test_event_catalog.py -v
"""

import pytest
from rest_framework.test import APIClient

from conftest import make_event, seed
from eventreg.stores.errors import StoreTimeoutError, StoreUnavailableError


def _register(api_client: APIClient, event_id: str = "evt-1", **body):
    payload = {"attendeeEmail": "ada@example.com", "attendeeName": "Ada Lovelace"}
    payload.update(body)
    return api_client.post(f"/api/events/{event_id}/register", payload, format="json")


class TestEventList:
    """Tests for GET /api/events"""

    def test_list_events_returns_events_and_total(self, api_client: APIClient, app_store):
        seed(app_store, make_event("a", maximum=5, registered=2), make_event("b"))

        response = api_client.get("/api/events")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert "nextToken" not in body
        first = body["events"][0]
        assert first["id"] == "a"
        assert first["capacity"] == {"max": 5, "registered": 2}
        assert first["category"]["id"] == "technology"
        assert first["pricing"]["individual"] == 25.0
        assert first["location"] == {"type": "physical", "address": "1 Main St"}

    def test_list_events_empty_catalog(self, api_client: APIClient, app_store):
        response = api_client.get("/api/events")

        assert response.status_code == 200
        assert response.json() == {"events": [], "total": 0}

    def test_list_events_filters(self, api_client: APIClient, app_store):
        seed(
            app_store,
            make_event("a", category="technology", maximum=2, registered=2),
            make_event("b", category="technology"),
            make_event("c", category="music"),
        )

        response = api_client.get("/api/events", {"category": "technology", "status": "available"})

        assert [event["id"] for event in response.json()["events"]] == ["b"]

    def test_list_events_search(self, api_client: APIClient, app_store):
        seed(app_store, make_event("a", title="Django Sprint"), make_event("b", title="Rust Night"))

        response = api_client.get("/api/events", {"search": "django"})

        assert [event["id"] for event in response.json()["events"]] == ["a"]

    def test_next_token_continues_the_listing(self, api_client: APIClient, app_store):
        seed(app_store, *(make_event(f"evt-{i}") for i in range(3)))

        first = api_client.get("/api/events", {"limit": 2}).json()
        second = api_client.get("/api/events", {"limit": 2, "continuationToken": first["nextToken"]}).json()

        assert [event["id"] for event in first["events"]] == ["evt-0", "evt-1"]
        assert [event["id"] for event in second["events"]] == ["evt-2"]
        assert "nextToken" not in second

    @pytest.mark.parametrize(
        "params, message",
        [
            ({"limit": 0}, "Limit must be between 1 and 100"),
            ({"limit": 101}, "Limit must be between 1 and 100"),
            ({"limit": "ten"}, "Limit must be between 1 and 100"),
            ({"status": "sold-out"}, "Status must be one of: available, full"),
            ({"continuationToken": "forged"}, "Invalid continuation token"),
        ],
    )
    def test_invalid_query_is_rejected(self, api_client: APIClient, app_store, params, message):
        response = api_client.get("/api/events", params)

        assert response.status_code == 400
        assert response.json() == {"error": "INVALID_REQUEST", "message": message}

    def test_store_failure_is_internal_error(self, api_client: APIClient, app_store, monkeypatch):
        def unavailable(**kwargs):
            raise StoreUnavailableError("scan failed: connection refused")

        monkeypatch.setattr(app_store, "scan", unavailable)

        response = api_client.get("/api/events")

        assert response.status_code == 500
        assert response.json() == {"error": "INTERNAL_ERROR", "message": "Internal error"}


class TestEventDetail:
    """Tests for GET /api/events/{id}"""

    def test_get_event_returns_details(self, api_client: APIClient, app_store):
        seed(app_store, make_event("evt-1", maximum=10, registered=3))

        response = api_client.get("/api/events/evt-1")

        assert response.status_code == 200
        event = response.json()["event"]
        assert event["id"] == "evt-1"
        assert event["title"] == "PyCon Meetup"
        assert event["date"] == "2026-11-20T18:00:00Z"
        assert event["capacity"] == {"max": 10, "registered": 3}

    def test_get_event_not_found(self, api_client: APIClient, app_store):
        response = api_client.get("/api/events/missing")

        assert response.status_code == 404
        assert response.json() == {"error": "EVENT_NOT_FOUND", "message": "Event not found"}

    def test_get_event_malformed_id(self, api_client: APIClient, app_store):
        response = api_client.get("/api/events/bad%23id")

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_REQUEST"


class TestRegistration:
    """Tests for POST /api/events/{id}/register"""

    def test_register_returns_registration_and_updated_event(self, api_client: APIClient, app_store):
        seed(app_store, make_event(maximum=10, registered=4))

        response = _register(api_client, groupSize=2)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["registrationId"].startswith("reg_")
        assert body["event"]["capacity"] == {"max": 10, "registered": 6}
        assert body["attendee"]["email"] == "ada@example.com"
        assert body["attendee"]["name"] == "Ada Lovelace"
        assert body["attendee"]["groupSize"] == 2
        assert body["attendee"]["registeredAt"]

    def test_group_size_defaults_to_one(self, api_client: APIClient, app_store):
        seed(app_store, make_event())

        response = _register(api_client)

        assert response.json()["attendee"]["groupSize"] == 1

    def test_integral_float_group_size_is_accepted(self, api_client: APIClient, app_store):
        seed(app_store, make_event(maximum=10, registered=0))

        response = _register(api_client, groupSize=2.0)

        assert response.status_code == 200
        assert response.json()["attendee"]["groupSize"] == 2
        assert response.json()["event"]["capacity"]["registered"] == 2

    def test_duplicate_is_reported_before_full_on_last_seat(self, api_client: APIClient, app_store):
        seed(app_store, make_event(maximum=1, registered=0))
        assert _register(api_client).status_code == 200

        response = _register(api_client)

        assert response.status_code == 400
        assert response.json()["error"] == "DUPLICATE_REGISTRATION"

    def test_duplicate_registration(self, api_client: APIClient, app_store):
        seed(app_store, make_event())
        _register(api_client)

        response = _register(api_client)

        assert response.status_code == 400
        assert response.json() == {
            "error": "DUPLICATE_REGISTRATION",
            "message": "This email is already registered for this event",
        }

    def test_full_event(self, api_client: APIClient, app_store):
        seed(app_store, make_event(maximum=5, registered=5))

        response = _register(api_client)

        assert response.status_code == 400
        assert response.json()["error"] == "EVENT_FULL"

    def test_insufficient_capacity(self, api_client: APIClient, app_store):
        seed(app_store, make_event(maximum=10, registered=8))

        response = _register(api_client, groupSize=3)

        assert response.status_code == 400
        assert response.json()["error"] == "INSUFFICIENT_CAPACITY"
        assert app_store.get_item("EVENT#evt-1", "METADATA")["capacity"]["registered"] == 8

    def test_invalid_email(self, api_client: APIClient, app_store):
        seed(app_store, make_event())

        response = _register(api_client, attendeeEmail="not-an-email")

        assert response.status_code == 400
        assert response.json() == {"error": "INVALID_EMAIL", "message": "Please provide a valid email address"}

    def test_missing_fields(self, api_client: APIClient, app_store):
        seed(app_store, make_event())

        response = api_client.post("/api/events/evt-1/register", {"attendeeEmail": "ada@example.com"}, format="json")

        assert response.status_code == 400
        assert response.json() == {
            "error": "INVALID_REQUEST",
            "message": "Missing required fields: attendeeEmail, attendeeName",
        }

    @pytest.mark.parametrize("group_size", [0, -3, "2", 1.5])
    def test_invalid_group_size(self, api_client: APIClient, app_store, group_size):
        seed(app_store, make_event())

        response = _register(api_client, groupSize=group_size)

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_REQUEST"

    def test_invalid_json_body(self, api_client: APIClient, app_store):
        response = api_client.post("/api/events/evt-1/register", data="{not json", content_type="application/json")

        assert response.status_code == 400
        assert response.json() == {"error": "INVALID_REQUEST", "message": "Invalid JSON in request body"}

    def test_unknown_event(self, api_client: APIClient, app_store):
        response = _register(api_client, event_id="missing")

        assert response.status_code == 404
        assert response.json()["error"] == "EVENT_NOT_FOUND"

    def test_timeout_reports_unknown_outcome(self, api_client: APIClient, app_store, monkeypatch):
        seed(app_store, make_event())

        def timed_out(*args, **kwargs):
            raise StoreTimeoutError("update_item timed out")

        monkeypatch.setattr(app_store, "conditional_update", timed_out)

        response = _register(api_client)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "INTERNAL_ERROR"
        assert body["outcomeUnknown"] is True


class TestFrameworkErrors:
    """Rejections raised by DRF itself use the same error body."""

    def test_method_not_allowed(self, api_client: APIClient, app_store):
        response = api_client.put("/api/events", {}, format="json")

        assert response.status_code == 405
        assert response.json() == {"error": "INVALID_REQUEST", "message": 'Method "PUT" not allowed.'}
        assert "GET" in response["Allow"]

    def test_unsupported_media_type(self, api_client: APIClient, app_store):
        seed(app_store, make_event())

        response = api_client.post("/api/events/evt-1/register", data="email=a", content_type="text/plain")

        assert response.status_code == 415
        assert response.json()["error"] == "INVALID_REQUEST"
