"""
Session manager - loads the session for a request and persists it.

Handlers never touch the cookie or the store directly. They receive a
SessionContext (via teamcal.deps.get_session), read or mutate it, and
call `await sessions.commit(ctx, response)` before returning. commit()
finishes the store write (or raises InternalFailureError) before the
response exists, so a redirect can never race an unsaved session.

Lifecycle of a session:
    load()    → existing session from cookie, or a fresh anonymous one
                (short anonymous TTL until it has a user)
    sign_in() → user + tokens written, id rotated
    commit()  → full write if new/modified, TTL extension otherwise
    destroy() → store entry deleted, cookie cleared
"""

import logging
from typing import Optional

from fastapi import Request, Response

from teamcal.core.config import Settings
from teamcal.core.errors import InternalFailureError, UnauthorizedError
from teamcal.core.security import generate_session_id, sign_session_id, unsign_session_id
from teamcal.environments.base import OAuthTokens
from teamcal.schemas.session import AuthState, SessionData, SessionUser
from teamcal.services.session_store import SessionStore


logger = logging.getLogger("teamcal.services.session_manager")


NO_TOKENS_MESSAGE = "No Google tokens available. Please re-authenticate."


class SessionContext:
    """
    The session of one request.

    Wraps SessionData with the operations handlers need and tracks
    whether anything changed, so commit() knows whether to write.
    """

    def __init__(self, session_id: str, data: Optional[SessionData] = None, is_new: bool = False):
        self.session_id = session_id
        self.data = data or SessionData()
        self.is_new = is_new
        self.modified = False
        # Set when the id is rotated; the old entry is deleted on commit
        self.replaced_session_id: Optional[str] = None

    # -------------------------------------------------------------------------
    # READ
    # -------------------------------------------------------------------------

    @property
    def user(self) -> Optional[SessionUser]:
        return self.data.user

    @property
    def auth_state(self) -> AuthState:
        return self.data.auth_state

    def require_user(self) -> SessionUser:
        if self.data.user is None:
            raise UnauthorizedError()
        return self.data.user

    def require_tokens(self) -> OAuthTokens:
        """The session's tokens, or 401 when signed out or cleared."""
        user = self.require_user()
        if user.tokens is None:
            raise UnauthorizedError(NO_TOKENS_MESSAGE)
        return user.tokens

    # -------------------------------------------------------------------------
    # MUTATE
    # -------------------------------------------------------------------------

    def sign_in(self, email: str, name: Optional[str], tokens: OAuthTokens) -> SessionUser:
        """
        Record a completed OAuth callback.

        The session id is rotated so an id planted before sign-in
        (session fixation) never becomes authenticated.
        """
        if not self.is_new:
            self.replaced_session_id = self.session_id
            self.session_id = generate_session_id()
        self.data.user = SessionUser(email=email, name=name, tokens=tokens)
        self.modified = True
        return self.data.user

    def clear_tokens(self) -> None:
        """Drop the tokens after Google rejected them; identity stays."""
        if self.data.user is not None and self.data.user.tokens is not None:
            self.data.user.tokens = None
            self.modified = True


class SessionManager:
    """
    Owns the session cookie and the SessionStore.

    Cookie: HttpOnly, SameSite=Lax, Secure when configured, Max-Age equal
    to the store TTL (the shorter anonymous TTL until a user signs in). Every committed request re-issues it, so expiry is
    sliding on both sides.
    """

    def __init__(
        self,
        store: SessionStore,
        secret: str,
        cookie_name: str = "teamcal.sid",
        ttl_seconds: int = 30 * 24 * 60 * 60,
        secure: bool = False,
        anonymous_ttl_seconds: Optional[int] = None,
    ):
        self.store = store
        self.secret = secret
        self.cookie_name = cookie_name
        self.ttl_seconds = ttl_seconds
        self.anonymous_ttl_seconds = min(anonymous_ttl_seconds or ttl_seconds, ttl_seconds)
        self.secure = secure

    @classmethod
    def from_settings(cls, store: SessionStore, settings: Settings) -> "SessionManager":
        return cls(
            store=store,
            secret=settings.SESSION_SECRET,
            cookie_name=settings.SESSION_COOKIE_NAME,
            ttl_seconds=settings.SESSION_TTL_SECONDS,
            anonymous_ttl_seconds=settings.ANONYMOUS_SESSION_TTL_SECONDS,
            secure=settings.cookie_secure,
        )

    # -------------------------------------------------------------------------
    # LOAD
    # -------------------------------------------------------------------------

    async def load(self, request: Request) -> SessionContext:
        """
        Resolve the request's session.

        A missing, forged or expired cookie yields a new anonymous session
        with a fresh id (never the id the client offered).
        """
        cookie_value = request.cookies.get(self.cookie_name)
        session_id = unsign_session_id(cookie_value, self.secret) if cookie_value else None

        data = None
        if session_id:
            try:
                data = await self.store.get(session_id)
            except Exception as e:
                logger.error(f"Session store read failed: {e}", exc_info=True)
                raise InternalFailureError(message="Session store unavailable")

        if data is None:
            ctx = SessionContext(generate_session_id(), is_new=True)
        else:
            ctx = SessionContext(session_id, data)

        user = ctx.user
        logger.debug(
            f"Session ID: {ctx.session_id[:8]}... "
            f"user: {f'{user.email} (has tokens: {user.tokens is not None})' if user else 'No user'}"
        )
        return ctx

    # -------------------------------------------------------------------------
    # PERSIST
    # -------------------------------------------------------------------------

    async def save(self, ctx: SessionContext) -> bool:
        """
        Write the session to the store.

        New or modified sessions are written in full; untouched ones only
        get their TTL extended. Sessions without a user are kept for
        anonymous_ttl_seconds only. Returns False when an untouched session
        has disappeared from the store meanwhile (logout, expiry).

        Raises:
            InternalFailureError: The store write failed
        """
        ttl_seconds = self.ttl_for(ctx)
        try:
            if ctx.is_new or ctx.modified:
                await self.store.set(ctx.session_id, ctx.data, ttl_seconds)
                if ctx.replaced_session_id:
                    await self.store.delete(ctx.replaced_session_id)
                    ctx.replaced_session_id = None
                ctx.is_new = False
                ctx.modified = False
                return True
            return await self.store.touch(ctx.session_id, ttl_seconds)
        except Exception as e:
            logger.error(f"Error saving session: {e}", exc_info=True)
            raise InternalFailureError(message="Could not save session")

    async def commit(self, ctx: SessionContext, response: Response) -> None:
        """Persist the session, then (re)issue its cookie on response."""
        if await self.save(ctx):
            self.set_cookie(response, ctx)

    async def destroy(self, ctx: SessionContext, response: Response) -> None:
        """
        Terminate the session. Idempotent.

        The cookie is cleared even if the store delete fails, in which
        case InternalFailureError is raised afterwards.
        """
        self.clear_cookie(response)
        try:
            await self.store.delete(ctx.session_id)
        except Exception as e:
            logger.error(f"Error destroying session: {e}", exc_info=True)
            raise InternalFailureError("Logout failed")
        ctx.data = SessionData()
        logger.info(f"Session {ctx.session_id[:8]}... destroyed")

    def ttl_for(self, ctx: SessionContext) -> int:
        return self.ttl_seconds if ctx.user is not None else self.anonymous_ttl_seconds

    # -------------------------------------------------------------------------
    # COOKIE
    # -------------------------------------------------------------------------

    def set_cookie(self, response: Response, ctx: SessionContext) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=sign_session_id(ctx.session_id, self.secret),
            max_age=self.ttl_for(ctx),
            httponly=True,
            samesite="lax",
            secure=self.secure,
            path="/",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            httponly=True,
            samesite="lax",
            secure=self.secure,
            path="/",
        )
