"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Everything a handler needs was built once by create_app() and hung on
app.state; these functions hand it out per request. Tests swap any of
them with app.dependency_overrides.
"""

from fastapi import Depends, Request

from teamcal.core.config import Settings
from teamcal.core.errors import UnauthorizedError
from teamcal.services.auth_service import AuthService
from teamcal.services.availability import AvailabilityService
from teamcal.services.member_repository import MemberRepository
from teamcal.services.session_manager import SessionContext, SessionManager


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_member_repository(request: Request) -> MemberRepository:
    return request.app.state.members


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_availability_service(request: Request) -> AvailabilityService:
    return request.app.state.availability_service


async def get_session(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> SessionContext:
    """
    The request's SessionContext.

    FastAPI caches dependencies per request, so every dependency and the
    handler itself see the same context object.
    """
    return await sessions.load(request)


async def require_roster_access(
    ctx: SessionContext = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> SessionContext:
    """
    Guard for the roster routes.

    With MEMBERS_REQUIRE_AUTH (the default) a signed-in user is required;
    Google tokens are not, since the roster never leaves the server.
    """
    if settings.MEMBERS_REQUIRE_AUTH:
        ctx.require_user()
    return ctx
