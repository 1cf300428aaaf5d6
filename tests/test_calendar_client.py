"""
Tests for the Google Calendar client (events.list only).
"""

import httpx
import pytest

from teamcal.environments.base import APIError, TokenExpiredError
from teamcal.environments.google.calendar import GoogleCalendarClient


EVENTS = [
    {"id": "evt1", "summary": "Standup", "start": {"dateTime": "2025-01-06T09:00:00+01:00"}},
    {"id": "evt2", "summary": "Review", "start": {"dateTime": "2025-01-06T14:00:00+01:00"}},
]


def make_client(handler, token="ya29.token") -> GoogleCalendarClient:
    return GoogleCalendarClient(token, timeout=5, transport=httpx.MockTransport(handler))


class TestListEvents:

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"kind": "calendar#events", "items": EVENTS})

        events = await make_client(handler).list_events(
            "ada@example.com",
            time_min="2025-01-06T00:00:00Z",
            time_max="2025-01-11T00:00:00Z",
            time_zone="Europe/Berlin",
        )

        assert events == EVENTS
        request = seen[0]
        assert request.method == "GET"
        assert request.url.host == "www.googleapis.com"
        assert request.url.path == "/calendar/v3/calendars/ada@example.com/events"
        assert request.headers["Authorization"] == "Bearer ya29.token"
        assert dict(request.url.params) == {
            "maxResults": "100",
            "singleEvents": "true",
            "orderBy": "startTime",
            "timeMin": "2025-01-06T00:00:00Z",
            "timeMax": "2025-01-11T00:00:00Z",
            "timeZone": "Europe/Berlin",
        }

    @pytest.mark.asyncio
    async def test_calendar_id_is_escaped(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": []})

        await make_client(handler).list_events("team/room#1@group.calendar.google.com")

        assert b"/calendars/team%2Froom%231%40group.calendar.google.com/events" in seen[0].url.raw_path

    @pytest.mark.asyncio
    async def test_absent_window_is_omitted(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": EVENTS})

        await make_client(handler).list_events("ada@example.com", max_results=25)

        params = seen[0].url.params
        assert params["maxResults"] == "25"
        assert "timeMin" not in params
        assert "timeMax" not in params
        assert "timeZone" not in params

    @pytest.mark.asyncio
    async def test_no_items_key(self):
        events = await make_client(lambda request: httpx.Response(200, json={"kind": "calendar#events"})).list_events(
            "ada@example.com"
        )

        assert events == []

    @pytest.mark.asyncio
    async def test_event_text_mentioning_invalid_grant(self):
        """Only failed responses are inspected for invalid_grant."""
        items = [
            {"id": "e1", "summary": "Debug invalid_grant errors"},
            {"id": "e2", "summary": "Lunch", "description": "bring the invalid_grant logs"},
        ]
        client = make_client(lambda request: httpx.Response(200, json={"items": items}))

        events = await client.list_events("ada@example.com")

        assert events == items


class TestListEventsErrors:

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        client = make_client(lambda request: httpx.Response(401, json={"error": {"code": 401}}))

        with pytest.raises(TokenExpiredError):
            await client.list_events("ada@example.com")

    @pytest.mark.asyncio
    async def test_invalid_grant(self):
        client = make_client(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

        with pytest.raises(TokenExpiredError):
            await client.list_events("ada@example.com")

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = make_client(lambda request: httpx.Response(500, text="backend error"))

        with pytest.raises(APIError) as exc_info:
            await client.list_events("ada@example.com")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_not_found(self):
        client = make_client(lambda request: httpx.Response(404, json={"error": {"code": 404}}))

        with pytest.raises(APIError) as exc_info:
            await client.list_events("nobody@example.com")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(APIError) as exc_info:
            await make_client(handler).list_events("ada@example.com")

        assert "Network error" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(APIError):
            await client.list_events("ada@example.com")
