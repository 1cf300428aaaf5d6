"""
Availability service - one member's calendar events in a time window.

Each step is a guard that fails with its own error before anything
external happens:

    1. session has no user          → UnauthorizedError (401)
    2. user has no tokens           → UnauthorizedError (401)
    3. member id not on the roster  → NotFoundError (404)
    4. one bounded events.list call with the session's access token
    5. success                      → Google's items, untouched
    6. token rejected by Google     → tokens cleared + saved,
                                      UpstreamAuthExpiredError (401)
    7. any other Google failure     → UpstreamFailureError (500), or []
                                      when configured to swallow them

No retries, no caching, no pagination.
"""

import logging
from typing import Callable, List, Optional

from teamcal.core.errors import NotFoundError, UpstreamAuthExpiredError, UpstreamFailureError
from teamcal.environments.base import APIError, TokenExpiredError
from teamcal.environments.google.calendar import GoogleCalendarClient
from teamcal.services.member_repository import MemberRepository
from teamcal.services.session_manager import SessionContext, SessionManager


logger = logging.getLogger("teamcal.services.availability")


CalendarClientFactory = Callable[[str], GoogleCalendarClient]


class AvailabilityService:
    def __init__(
        self,
        members: MemberRepository,
        sessions: SessionManager,
        calendar_factory: CalendarClientFactory,
        max_results: int = 100,
        errors_as_empty: bool = False,
    ):
        """
        Args:
            members: Roster used to resolve member ids
            sessions: Used to persist the session when tokens are cleared
            calendar_factory: Builds a calendar client from an access token
            max_results: Page size of the single events.list call
            errors_as_empty: Report upstream failures as [] instead of 500
        """
        self.members = members
        self.sessions = sessions
        self.calendar_factory = calendar_factory
        self.max_results = max_results
        self.errors_as_empty = errors_as_empty

    async def fetch(
        self,
        ctx: SessionContext,
        member_id: str,
        timezone: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[dict]:
        logger.info(f"Fetching availability for member ID: {member_id}")

        tokens = ctx.require_tokens()
        logger.debug(f"Google tokens found: {tokens.describe()}")

        member = await self._find_member(member_id)

        calendar = self.calendar_factory(tokens.access_token)
        try:
            return await calendar.list_events(
                calendar_id=member.calendarId,
                time_min=start,
                time_max=end,
                time_zone=timezone,
                max_results=self.max_results,
                single_events=True,
                order_by="startTime",
            )
        except TokenExpiredError:
            logger.info("Token appears to be expired or invalid, clearing session tokens")
            ctx.clear_tokens()
            await self.sessions.save(ctx)
            raise UpstreamAuthExpiredError()
        except APIError as e:
            logger.error(f"Google Calendar API error: {e}")
            if self.errors_as_empty:
                logger.info("Returning empty event list on Google API error")
                return []
            raise UpstreamFailureError(message=str(e))

    async def _find_member(self, member_id: str):
        # Path values that are not integers cannot name a member
        try:
            numeric_id = int(member_id)
        except (TypeError, ValueError):
            numeric_id = None

        member = await self.members.get(numeric_id) if numeric_id is not None else None
        if member is None:
            logger.warning(f"Member not found with ID: {member_id}")
            raise NotFoundError("Member not found")

        logger.info(f"Found member: {member.name}")
        return member
