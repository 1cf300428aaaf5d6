"""
Members router - the team roster.

- GET  /api/members → every member
- POST /api/members → add one (201), 400 if a field is missing

Both require a signed-in session while MEMBERS_REQUIRE_AUTH is on.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from teamcal.core.errors import RequestValidationFailedError
from teamcal.deps import get_member_repository, get_session_manager, require_roster_access
from teamcal.schemas.member import Member, MemberCreate
from teamcal.services.member_repository import MemberRepository
from teamcal.services.session_manager import SessionContext, SessionManager


logger = logging.getLogger("teamcal.routers.members")


router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("", response_model=List[Member])
async def list_members(
    response: Response,
    ctx: SessionContext = Depends(require_roster_access),
    members: MemberRepository = Depends(get_member_repository),
    sessions: SessionManager = Depends(get_session_manager),
):
    await sessions.commit(ctx, response)
    return await members.list()


@router.post("", response_model=Member, status_code=status.HTTP_201_CREATED)
async def create_member(
    payload: MemberCreate,
    response: Response,
    ctx: SessionContext = Depends(require_roster_access),
    members: MemberRepository = Depends(get_member_repository),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Add a member. The id is assigned here and is greater than any id
    assigned before.

    Example request body:
    {
        "name": "Ada",
        "email": "ada@example.com",
        "calendarId": "ada@example.com"
    }
    """
    missing = payload.missing_fields()
    if missing:
        logger.info(f"Rejected member without {', '.join(missing)}")
        raise RequestValidationFailedError("Name, email, and calendarId are required")

    member = await members.insert(
        name=payload.name.strip(),
        email=payload.email.strip(),
        calendar_id=payload.calendarId.strip(),
    )
    await sessions.commit(ctx, response)
    return member
