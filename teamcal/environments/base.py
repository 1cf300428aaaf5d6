"""
Base classes and interfaces for external provider integrations.

This module defines the contracts shared by the Google clients:
- integration exceptions (translated into HTTP errors by the services)
- OAuthTokens / UserInfo data structures
- EnvironmentProvider: abstract OAuth provider
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class EnvironmentError(Exception):
    """Base exception for all provider-related errors."""
    pass


class AuthenticationError(EnvironmentError):
    """Raised when the OAuth handshake or identity verification fails."""
    pass


class TokenExpiredError(EnvironmentError):
    """Raised when the provider rejects a token (401 / invalid_grant)."""
    pass


class APIError(EnvironmentError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


class OAuthTokens(BaseModel):
    """
    Token bundle kept in the session.

    Field names follow what Google's token endpoint returns, with
    expires_in converted to an absolute expiry_date in epoch ms.
    Never serialized to the client.
    """
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expiry_date: Optional[int] = None
    scope: Optional[str] = None
    id_token: Optional[str] = None

    def describe(self) -> dict:
        """Log-safe summary: presence flags only, never token values."""
        return {
            "access_token": "present" if self.access_token else "missing",
            "refresh_token": "present" if self.refresh_token else "missing",
            "expiry_date": self.expiry_date,
        }

    def get_scopes_list(self) -> List[str]:
        return self.scope.split() if self.scope else []


@dataclass
class UserInfo:
    """Identity extracted from a verified id_token."""
    provider_user_id: str
    email: Optional[str] = None
    name: Optional[str] = None


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class EnvironmentProvider(ABC):
    """
    Abstract base class for OAuth providers.

    The provider is responsible for:
    - Generating authorization URLs
    - Exchanging authorization codes for tokens
    - Verifying the identity assertion that comes with the tokens
    """

    provider_name: str = ""

    @abstractmethod
    def get_authorization_url(self, scopes: List[str], state: Optional[str] = None) -> str:
        """Build the consent-screen URL for the given scopes."""

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            AuthenticationError: If code exchange fails
        """

    @abstractmethod
    async def verify_id_token(self, id_token: str, access_token: Optional[str] = None) -> UserInfo:
        """
        Verify the identity assertion and return who signed in.

        Raises:
            AuthenticationError: If the assertion does not verify
        """
