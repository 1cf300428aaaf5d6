"""
Auth Router - Google sign-in, identity and logout endpoints.

Endpoints:
==========
- GET  /auth/google   → Redirect to Google OAuth consent screen
- GET  /auth/callback → Exchange code, store tokens in session, redirect to front end
- GET  /api/me        → Who is signed in (never the tokens)
- POST /logout        → Destroy the session and clear its cookie

OAuth Flow:
===========
1. Front end sends the browser to GET /auth/google
2. Backend redirects to Google's consent screen
3. User grants calendar.readonly + userinfo.email
4. Google redirects to /auth/callback with a one-time code
5. Backend exchanges code for tokens, verifies the id_token
6. Session is saved, then the browser is redirected to the front end
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from teamcal.core.config import Settings
from teamcal.core.errors import InternalFailureError
from teamcal.deps import get_auth_service, get_session, get_session_manager, get_settings
from teamcal.schemas.user import LogoutResponse, MeResponse, MeUser
from teamcal.services.auth_service import AuthService
from teamcal.services.session_manager import SessionContext, SessionManager


logger = logging.getLogger("teamcal.routers.auth")


router = APIRouter(tags=["auth"])


@router.get("/auth/google")
async def google_login(auth: AuthService = Depends(get_auth_service)):
    """
    Initiate Google OAuth login flow.

    Does not read or write the session; state only changes once Google
    calls back.
    """
    return RedirectResponse(url=auth.initiate(), status_code=status.HTTP_302_FOUND)


@router.get("/auth/callback")
async def google_callback(
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    error: Optional[str] = Query(None, description="Error from Google"),
    ctx: SessionContext = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
):
    """
    Handle Google OAuth callback.

    Flow:
        1. Exchange code for tokens and verify the id_token
        2. Write {email, name, tokens} into the session
        3. Await the session write
        4. Redirect to the front-end origin

    Failures before step 3 return 500 {"error": "Authentication failed",
    "message": ...} and leave the session as it was.
    """
    user = await auth.complete_login(ctx, code=code, error=error)

    response = RedirectResponse(url=settings.client_origin, status_code=status.HTTP_302_FOUND)
    await sessions.commit(ctx, response)

    logger.info(f"Session saved for {user.email}; redirecting to {settings.client_origin}")
    return response


@router.get("/api/me", response_model=MeResponse)
async def read_current_user(
    response: Response,
    ctx: SessionContext = Depends(get_session),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Return the signed-in user's identity.

    Tokens are reduced to a hasTokens flag so the front end can tell a
    fresh sign-in from one whose Google grant was revoked.
    """
    await sessions.commit(ctx, response)

    user = ctx.user
    if user is None:
        return MeResponse(user=None)
    return MeResponse(
        user=MeUser(email=user.email, name=user.name, hasTokens=user.tokens is not None)
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    ctx: SessionContext = Depends(get_session),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Destroy the session. Calling it again (or without a session) still
    succeeds and still clears the cookie.
    """
    try:
        await sessions.destroy(ctx, response)
    except InternalFailureError as exc:
        failed = JSONResponse(status_code=exc.status_code, content=exc.to_body())
        sessions.clear_cookie(failed)
        return failed

    return LogoutResponse(success=True)
