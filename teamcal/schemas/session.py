"""
Session schemas - what the server keeps per browser session.

SessionData is the value stored under the session id. It is a pydantic
model so both stores serialize it the same way (model_dump / model_validate).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from teamcal.environments.base import OAuthTokens


class AuthState(str, Enum):
    """Where a session sits in the sign-in lifecycle."""

    # No user in the session
    ANONYMOUS = "anonymous"

    # User known but tokens cleared (Google rejected them): must re-consent
    SIGNED_IN = "signed_in"

    # User with tokens: calendar queries allowed
    AUTHENTICATED = "authenticated"


class SessionUser(BaseModel):
    """Signed-in user. tokens is None once Google has rejected them."""
    email: str
    name: Optional[str] = None
    tokens: Optional[OAuthTokens] = None


class SessionData(BaseModel):
    user: Optional[SessionUser] = None

    @property
    def auth_state(self) -> AuthState:
        if self.user is None:
            return AuthState.ANONYMOUS
        if self.user.tokens is None:
            return AuthState.SIGNED_IN
        return AuthState.AUTHENTICATED
