"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

import typing as t

from django.conf import settings
from django.core.cache import cache
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from eventreg.cache import event_cache_key
from eventreg.domain import EventFilter, EventStatus
from eventreg.domain.errors import InvalidRequestError
from eventreg.handlers.serializers import (
    AttendeeSerializer,
    EventListQuerySerializer,
    EventSerializer,
    RegistrationRequestSerializer,
)
from eventreg.services import get_catalog, get_registration_service
from eventreg.services.catalog_service import DEFAULT_LIMIT, MAX_LIMIT, parse_event_id


def _query_error_message(errors: dict[str, t.Any]) -> str:
    if "limit" in errors:
        return f"Limit must be between 1 and {MAX_LIMIT}"
    if "status" in errors:
        return "Status must be one of: available, full"
    return "Invalid query parameters"


class EventListView(APIView):
    """Handler for GET /api/events"""

    def get(self, request: Request) -> Response:
        query = EventListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            raise InvalidRequestError(_query_error_message(query.errors))
        params = query.validated_data

        status = params.get("status")
        page = get_catalog().list_events(
            EventFilter(
                category=params.get("category") or None,
                search=params.get("search") or None,
                status=EventStatus(status) if status else None,
            ),
            limit=params.get("limit", DEFAULT_LIMIT),
            continuation_token=params.get("continuationToken"),
        )

        body: dict[str, t.Any] = {
            "events": EventSerializer(page.events, many=True).data,
            "total": page.total,
        }
        if page.next_token:
            body["nextToken"] = page.next_token
        return Response(body)


class EventDetailView(APIView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        key = event_cache_key(parse_event_id(event_id).value)
        data = cache.get(key)
        if data is None:
            event = get_catalog().get_event(event_id)
            data = EventSerializer(event).data
            cache.set(key, data, settings.EVENTREG_EVENT_CACHE_SECONDS)
        return Response({"event": data})


class EventRegistrationView(APIView):
    """Handler for POST /api/events/{event_id}/register"""

    def post(self, request: Request, event_id: str) -> Response:
        payload = RegistrationRequestSerializer(data=request.data)
        if not payload.is_valid():
            raise InvalidRequestError("Missing required fields: attendeeEmail, attendeeName")
        data = payload.validated_data

        result = get_registration_service().register(
            event_id,
            attendee_email=data["attendeeEmail"],
            attendee_name=data["attendeeName"],
            group_size=data.get("groupSize", 1),
        )
        return Response(
            {
                "success": True,
                "registrationId": result.registration.registration_id,
                "event": EventSerializer(result.event).data,
                "attendee": AttendeeSerializer(result.registration).data,
            }
        )
