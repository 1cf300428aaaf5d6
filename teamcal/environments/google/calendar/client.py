"""
Google Calendar API Client - read-only event queries.

Events are returned exactly as Google sends them (raw JSON dicts) so the
availability endpoint can pass them through without adding or dropping
fields.

API Reference:
==============
- Events API: https://developers.google.com/calendar/api/v3/reference/events/list

Usage Example:
==============
    client = GoogleCalendarClient(access_token="ya29.xxx")
    events = await client.list_events(
        calendar_id="ada@example.com",
        time_min="2025-01-06T00:00:00Z",
        time_max="2025-01-11T00:00:00Z",
        time_zone="Europe/Berlin",
    )
"""

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from teamcal.core.config import settings
from teamcal.environments.base import APIError, TokenExpiredError


logger = logging.getLogger("teamcal.environments.google.calendar")


class GoogleCalendarClient:
    """
    Google Calendar API client bound to one access token.

    Attributes:
        access_token: Google OAuth access token with calendar.readonly scope
    """

    BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    async def _make_request(self, method: str, endpoint: str, params: Optional[dict] = None) -> dict:
        """
        Make an authenticated request to the Calendar API.

        Raises:
            TokenExpiredError: Google answered 401 or reported invalid_grant
            APIError: Any other failure (HTTP error or network error)
        """
        url = f"{self.BASE_URL}{endpoint}"

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    params=params,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in Calendar API: {e}")
                raise APIError(f"Network error: {e}")

        if response.status_code != 200:
            # Event text can mention invalid_grant too; only error bodies count
            if response.status_code == 401 or "invalid_grant" in response.text:
                logger.warning(f"Calendar API rejected the token ({response.status_code})")
                raise TokenExpiredError("Google token expired or revoked")

            logger.error(f"Calendar API error: {response.status_code} - {response.text}")
            raise APIError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                response=response.text,
            )

        try:
            return response.json()
        except ValueError:
            raise APIError("Calendar API returned a non-JSON body", status_code=response.status_code)

    # -------------------------------------------------------------------------
    # CALENDAR EVENTS
    # -------------------------------------------------------------------------

    async def list_events(
        self,
        calendar_id: str,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
        time_zone: Optional[str] = None,
        max_results: int = 100,
        single_events: bool = True,
        order_by: str = "startTime",
    ) -> List[dict]:
        """
        Fetch one page of events from a calendar.

        Args:
            calendar_id: Calendar address (usually the member's email)
            time_min: RFC3339 lower bound, passed through untouched
            time_max: RFC3339 upper bound, passed through untouched
            time_zone: IANA zone used for times in the response
            max_results: Page size; no further pages are fetched
            single_events: Expand recurring events into single occurrences
            order_by: "startTime" (requires single_events)

        Returns:
            The "items" array from Google, or [] when absent
        """
        params = {
            "maxResults": max_results,
            "singleEvents": str(single_events).lower(),
            "orderBy": order_by,
        }
        if time_min:
            params["timeMin"] = time_min
        if time_max:
            params["timeMax"] = time_max
        if time_zone:
            params["timeZone"] = time_zone

        logger.info(
            f"Fetching calendar with params: timezone={time_zone}, start={time_min}, end={time_max}"
        )

        data = await self._make_request(
            method="GET",
            endpoint=f"/calendars/{quote(calendar_id, safe='')}/events",
            params=params,
        )

        items = data.get("items") or []

        logger.info(f"Successfully fetched {len(items)} events")
        if items:
            logger.debug(f"First event: {items[0]}")

        return items
