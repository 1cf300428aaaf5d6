"""
Google Auth Module - OAuth 2.0 sign-in with Google.

OAuth 2.0 Flow Overview:
========================
1. User hits /auth/google
2. Backend redirects to Google's consent screen with LOGIN_SCOPES
3. Google redirects back to /auth/callback with a one-time code
4. Backend exchanges the code for tokens and verifies the id_token
5. Tokens go into the server-side session, never to the browser
"""

from teamcal.environments.google.auth.client import GoogleAuthClient
from teamcal.environments.google.auth.schemas import (
    CALENDAR_READONLY_SCOPE,
    GOOGLE_ISSUERS,
    LOGIN_SCOPES,
    USERINFO_EMAIL_SCOPE,
    GoogleIdTokenClaims,
    GoogleTokenResponse,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleIdTokenClaims",
    "GoogleTokenResponse",
    "CALENDAR_READONLY_SCOPE",
    "USERINFO_EMAIL_SCOPE",
    "GOOGLE_ISSUERS",
    "LOGIN_SCOPES",
]
