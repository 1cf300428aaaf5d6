"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import List, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


# Front-end origin used outside production (CRA / Vite dev server)
DEVELOPMENT_CLIENT_URL = "http://localhost:3000"


class SeedMember(BaseModel):
    """One roster entry loaded from INITIAL_MEMBERS."""
    name: str
    email: str
    calendarId: str


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override in production, set environment variables:
        export ENVIRONMENT=production
        export SESSION_SECRET=your-super-secret-random-string
        export CLIENT_URL=https://team-calendar.example.com
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    APP_NAME: str = "Teamcal"

    # ENVIRONMENT: "development" or "production"
    # - production turns on Secure cookies, hides exception text in 500s
    #   and reports upstream calendar failures as errors instead of []
    ENVIRONMENT: str = "development"

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000

    # ---------------------------------------------------------------------------
    # GOOGLE OAUTH SETTINGS
    # ---------------------------------------------------------------------------
    # Google Cloud Console: https://console.cloud.google.com/apis/credentials
    # The redirect URI must match the one registered for the OAuth client.
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:5000/auth/callback"

    # CLIENT_URL: front-end origin (CORS + post-login redirect) in production
    CLIENT_URL: str = ""

    # ---------------------------------------------------------------------------
    # SESSION SETTINGS
    # ---------------------------------------------------------------------------
    # SESSION_SECRET signs the session cookie. MUST be changed in production.
    # Generate with: openssl rand -hex 32
    SESSION_SECRET: str = "change-me-in-production"
    SESSION_COOKIE_NAME: str = "teamcal.sid"

    # Sliding expiry. 30 days by default, 86400 for the 24-hour variant.
    SESSION_TTL_SECONDS: int = 30 * 24 * 60 * 60

    # Sessions without a signed-in user expire much sooner
    ANONYMOUS_SESSION_TTL_SECONDS: int = 60 * 60

    # "memory" (lost on restart) or "database" (DATABASE_URL)
    SESSION_STORE: str = "memory"

    # None means "Secure only in production"
    COOKIE_SECURE: Optional[bool] = None

    # ---------------------------------------------------------------------------
    # STORAGE
    # ---------------------------------------------------------------------------
    DATABASE_URL: str = "sqlite:///./teamcal.db"
    MEMBER_STORE: str = "memory"

    # JSON list of {"name", "email", "calendarId"} used to seed the
    # in-memory roster, e.g. INITIAL_MEMBERS='[{"name": "Ada", ...}]'
    INITIAL_MEMBERS: List[SeedMember] = []

    # ---------------------------------------------------------------------------
    # HARDENING
    # ---------------------------------------------------------------------------
    MEMBERS_REQUIRE_AUTH: bool = True
    SECURITY_HEADERS_ENABLED: bool = True
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT: str = "100 per 15 minutes"

    # ---------------------------------------------------------------------------
    # CALENDAR QUERIES
    # ---------------------------------------------------------------------------
    CALENDAR_MAX_RESULTS: int = 100
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # None means "return [] on upstream failure outside production"
    UPSTREAM_ERRORS_AS_EMPTY: Optional[bool] = None

    # ---------------------------------------------------------------------------
    # DERIVED VALUES
    # ---------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def client_origin(self) -> str:
        """Front-end origin for CORS and the post-login redirect."""
        if self.is_production and self.CLIENT_URL:
            return self.CLIENT_URL
        return DEVELOPMENT_CLIENT_URL

    @property
    def cookie_secure(self) -> bool:
        if self.COOKIE_SECURE is None:
            return self.is_production
        return self.COOKIE_SECURE

    @property
    def upstream_errors_as_empty(self) -> bool:
        if self.UPSTREAM_ERRORS_AS_EMPTY is None:
            return not self.is_production
        return self.UPSTREAM_ERRORS_AS_EMPTY


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from teamcal.core.config import settings
settings = Settings()
