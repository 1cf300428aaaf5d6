"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Settings / app factory (in-memory stores, rate limiting off)
- Test client (FastAPI TestClient)
- Mocked Google: auth client methods and calendar client factory
- Sign-in helper
- SQLite in-memory database for the SQL-backed stores
"""

from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from teamcal.core.config import Settings
from teamcal.db.base import Base
from teamcal.db.session import create_session_factory
from teamcal.environments.base import OAuthTokens, UserInfo
from teamcal.main import create_app
from teamcal.models import member, stored_session  # noqa: F401


TEST_CLIENT_ID = "test-client-id.apps.googleusercontent.com"
TEST_ACCESS_TOKEN = "ya29.test-access-token"

SEED_MEMBERS = [
    {"name": "Ada Lovelace", "email": "ada@example.com", "calendarId": "ada@example.com"},
    {"name": "Alan Turing", "email": "alan@example.com", "calendarId": "alan@example.com"},
]

SAMPLE_EVENTS = [
    {
        "id": "evt1",
        "summary": "Standup",
        "start": {"dateTime": "2025-01-06T09:00:00+01:00"},
        "end": {"dateTime": "2025-01-06T09:15:00+01:00"},
    },
    {
        "id": "evt2",
        "summary": "Review",
        "start": {"dateTime": "2025-01-06T14:00:00+01:00"},
        "end": {"dateTime": "2025-01-06T15:00:00+01:00"},
    },
]


def make_settings(**overrides) -> Settings:
    """Settings for tests: no .env file, Google configured, no rate limit."""
    values = {
        "ENVIRONMENT": "development",
        "GOOGLE_CLIENT_ID": TEST_CLIENT_ID,
        "GOOGLE_CLIENT_SECRET": "test-client-secret",
        "SESSION_SECRET": "test-session-secret",
        "SESSION_STORE": "memory",
        "MEMBER_STORE": "memory",
        "INITIAL_MEMBERS": SEED_MEMBERS,
        "RATE_LIMIT_ENABLED": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def mock_google(app: FastAPI, events=None) -> MagicMock:
    """
    Replace every outbound Google call on app.

    - auth client: exchange returns TEST_ACCESS_TOKEN, id_token names Ada
    - calendar factory: returns a client whose list_events yields events

    Returns the calendar client mock.
    """
    auth_client = app.state.auth_service.auth_client
    auth_client.exchange_code_for_tokens = AsyncMock(
        return_value=OAuthTokens(
            access_token=TEST_ACCESS_TOKEN,
            refresh_token="1//test-refresh-token",
            expiry_date=1736150400000,
            scope="https://www.googleapis.com/auth/calendar.readonly",
            id_token="header.payload.signature",
        )
    )
    auth_client.verify_id_token = AsyncMock(
        return_value=UserInfo(
            provider_user_id="1234567890",
            email="ada@example.com",
            name="Ada Lovelace",
        )
    )

    calendar = MagicMock()
    calendar.list_events = AsyncMock(return_value=list(SAMPLE_EVENTS if events is None else events))
    app.state.availability_service.calendar_factory = MagicMock(return_value=calendar)
    return calendar


def sign_in(client: TestClient):
    """Complete the OAuth callback; the session cookie lands in client."""
    response = client.get("/auth/callback", params={"code": "test-code"}, follow_redirects=False)
    assert response.status_code == 302
    return response


# ---------------------------------------------------------------------------
# APP FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Fresh app per test: its own stores, limiter and mocks."""
    application = create_app(settings)
    mock_google(application)
    return application


@pytest.fixture
def calendar(app: FastAPI) -> MagicMock:
    """The calendar client every availability request receives."""
    return app.state.availability_service.calendar_factory.return_value


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signed_in_client(client: TestClient) -> TestClient:
    """Client whose session holds Ada with Google tokens."""
    sign_in(client)
    return client


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------
# SQLite in-memory; StaticPool keeps one connection so every threadpool
# call sees the same database.

@pytest.fixture
def db_session_factory() -> Generator[sessionmaker, None, None]:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield create_session_factory(engine)
    finally:
        engine.dispose()


def create_tables(database_url: str) -> None:
    """Build the schema in a file database the way the test fixtures do."""
    engine = create_engine(database_url)
    Base.metadata.create_all(bind=engine)
    engine.dispose()


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
