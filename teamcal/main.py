"""
Main application entry point - FastAPI app factory and configuration.
Run with: uvicorn teamcal.main:app --port 5000

create_app() wires everything once:
- session store + SessionManager (memory or database)
- member repository (memory or database)
- Google auth client / calendar client factory
- CORS, security headers, rate limiting, error handlers
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from teamcal.core.config import Settings, settings as default_settings
from teamcal.core.limiter import build_limiter
from teamcal.core.logger import configure_logging
from teamcal.core.middleware import SecurityHeadersMiddleware, register_error_handlers
from teamcal.db.session import create_db_engine, create_session_factory
from teamcal.environments.google import GoogleAuthClient, GoogleCalendarClient
from teamcal.routers import auth, availability, members
from teamcal.services.auth_service import AuthService
from teamcal.services.availability import AvailabilityService
from teamcal.services.member_repository import InMemoryMemberRepository, SqlMemberRepository
from teamcal.services.session_manager import SessionManager
from teamcal.services.session_store import DatabaseSessionStore, MemorySessionStore


logger = logging.getLogger("teamcal.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: purge stale session rows, dispose the DB engine."""
    store = app.state.session_manager.store
    if isinstance(store, DatabaseSessionStore):
        removed = store.purge_expired()
        logger.info(f"Purged {removed} expired sessions at startup")

    yield

    engine = getattr(app.state, "db_engine", None)
    if engine is not None:
        engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to the environment
    """
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ---------------------------------------------------------------------------
    # STORAGE
    # ---------------------------------------------------------------------------
    # Tables come from `alembic upgrade head`
    session_factory = None
    if "database" in (settings.SESSION_STORE, settings.MEMBER_STORE):
        engine = create_db_engine(settings.DATABASE_URL)
        session_factory = create_session_factory(engine)
        app.state.db_engine = engine

    if settings.SESSION_STORE == "database":
        session_store = DatabaseSessionStore(session_factory)
        logger.info("Using database for session storage")
    else:
        session_store = MemorySessionStore()
        logger.info("Using in-memory session storage")

    if settings.MEMBER_STORE == "database":
        member_repository = SqlMemberRepository(session_factory)
        member_repository.seed_if_empty(settings.INITIAL_MEMBERS)
    else:
        member_repository = InMemoryMemberRepository(settings.INITIAL_MEMBERS)

    # ---------------------------------------------------------------------------
    # SERVICES
    # ---------------------------------------------------------------------------
    session_manager = SessionManager.from_settings(session_store, settings)
    auth_client = GoogleAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

    def calendar_factory(access_token: str) -> GoogleCalendarClient:
        return GoogleCalendarClient(access_token, timeout=settings.HTTP_TIMEOUT_SECONDS)

    app.state.session_manager = session_manager
    app.state.members = member_repository
    app.state.auth_service = AuthService(auth_client)
    app.state.availability_service = AvailabilityService(
        members=member_repository,
        sessions=session_manager,
        calendar_factory=calendar_factory,
        max_results=settings.CALENDAR_MAX_RESULTS,
        errors_as_empty=settings.upstream_errors_as_empty,
    )

    # ---------------------------------------------------------------------------
    # MIDDLEWARE (last added runs first)
    # ---------------------------------------------------------------------------
    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    register_error_handlers(app, expose_details=not settings.is_production)

    if settings.SECURITY_HEADERS_ENABLED:
        app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)

    # Only the front end may call us, with its cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    # ---------------------------------------------------------------------------
    # ROUTERS
    # ---------------------------------------------------------------------------
    app.include_router(auth.router)
    app.include_router(members.router)
    app.include_router(availability.router)

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe. Does not touch the session store."""
        return {"status": "ok"}

    # Rate limits apply to /api/* only
    for endpoint in (auth.google_login, auth.google_callback, auth.logout, health_check):
        limiter.exempt(endpoint)

    logger.info(f"{settings.APP_NAME} configured (environment: {settings.ENVIRONMENT})")
    return app


app = create_app()
