"""
Google OAuth Schemas - Data structures for Google authentication.

Using Pydantic models ensures the token endpoint and id_token payloads
are validated before they reach the session.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# OAUTH SCOPE CONSTANTS
# ---------------------------------------------------------------------------
# Reference: https://developers.google.com/identity/protocols/oauth2/scopes

CALENDAR_READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"
USERINFO_EMAIL_SCOPE = "https://www.googleapis.com/auth/userinfo.email"

# Requested at sign-in: read other members' calendars + identify the user
LOGIN_SCOPES = [
    CALENDAR_READONLY_SCOPE,
    USERINFO_EMAIL_SCOPE,
]

# Accepted "iss" values for Google id_tokens
GOOGLE_ISSUERS = ["accounts.google.com", "https://accounts.google.com"]


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "refresh_token": "1//0eXyz...",
        "scope": "https://www.googleapis.com/auth/calendar.readonly ...",
        "token_type": "Bearer",
        "id_token": "eyJhbGciOiJSUzI1NiIs..."
    }
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Refresh token for renewal")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")
    id_token: Optional[str] = Field(None, description="JWT with user info (OpenID)")

    def get_expiry_date(self) -> Optional[int]:
        """Absolute expiry in epoch milliseconds."""
        if self.expires_in is None:
            return None
        now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
        return now_ms + self.expires_in * 1000

    def get_scopes_list(self) -> List[str]:
        return self.scope.split() if self.scope else []


# ---------------------------------------------------------------------------
# ID TOKEN
# ---------------------------------------------------------------------------

class GoogleIdTokenClaims(BaseModel):
    """
    Verified payload of a Google id_token.

    Only the claims we read are declared; the rest are ignored.
    """
    sub: str
    email: Optional[str] = None
    # Google has sent both the boolean and the string "true"
    email_verified: Optional[Union[bool, str]] = None
    name: Optional[str] = None
