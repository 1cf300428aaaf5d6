"""
Availability router - a member's calendar events for a time window.

GET /api/availability/{member_id}?timezone=Europe/Berlin&start=...&end=...

Returns Google's event records unchanged, in start-time order.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from teamcal.deps import get_availability_service, get_session, get_session_manager
from teamcal.services.availability import AvailabilityService
from teamcal.services.session_manager import SessionContext, SessionManager


router = APIRouter(prefix="/api/availability", tags=["availability"])


@router.get("/{member_id}", response_model=List[dict])
async def get_availability(
    member_id: str,
    response: Response,
    timezone: Optional[str] = Query(None, description="IANA time zone for returned times"),
    start: Optional[str] = Query(None, description="RFC3339 window start (timeMin)"),
    end: Optional[str] = Query(None, description="RFC3339 window end (timeMax)"),
    ctx: SessionContext = Depends(get_session),
    availability: AvailabilityService = Depends(get_availability_service),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    member_id is taken as a string so a non-numeric id is a 404 like any
    other unknown member, not a validation error.
    """
    events = await availability.fetch(ctx, member_id, timezone=timezone, start=start, end=end)
    await sessions.commit(ctx, response)
    return events
