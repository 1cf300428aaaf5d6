"""
Google OAuth Client - Handles the OAuth 2.0 sign-in flow with Google.

Key Features:
=============
1. Authorization URL generation (offline access, forced re-consent)
2. Code-to-token exchange
3. id_token verification against Google's published signing keys

OAuth 2.0 Flow Implementation:
==============================
1. get_authorization_url() → User redirected to Google
2. exchange_code_for_tokens() → Called in callback, gets tokens
3. verify_id_token() → Confirms who signed in (email + name)

There is deliberately no refresh method: an expired grant sends the user
back through the consent screen.

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
- Signing keys: https://www.googleapis.com/oauth2/v3/certs
"""

import logging
import time
from typing import List, Optional
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt
from pydantic import ValidationError

from teamcal.core.config import settings
from teamcal.environments.base import (
    AuthenticationError,
    EnvironmentProvider,
    OAuthTokens,
    UserInfo,
)
from teamcal.environments.google.auth.schemas import (
    GOOGLE_ISSUERS,
    GoogleIdTokenClaims,
    GoogleTokenResponse,
)


logger = logging.getLogger("teamcal.environments.google.auth")


class GoogleAuthClient(EnvironmentProvider):
    """
    Google OAuth 2.0 Client implementation.

    Example Usage:
        client = GoogleAuthClient()

        # Step 1: Generate auth URL
        auth_url = client.get_authorization_url(scopes=LOGIN_SCOPES)
        # Redirect user to auth_url

        # Step 2: Handle callback
        tokens = await client.exchange_code_for_tokens(code="abc123")

        # Step 3: Verify who signed in
        user = await client.verify_id_token(tokens.id_token, tokens.access_token)
    """

    provider_name = "google"

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"

    # Google rotates keys roughly daily; one hour keeps us well inside that
    CERTS_CACHE_SECONDS = 3600

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID (defaults to settings)
            client_secret: Google OAuth Client Secret (defaults to settings)
            redirect_uri: OAuth callback URL (defaults to settings)
            timeout: Seconds before an outbound call is abandoned
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GOOGLE_REDIRECT_URI
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

        self._certs: Optional[dict] = None
        self._certs_fetched_at = 0.0

        if not self.client_id or not self.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET in environment variables."
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: List[str],
        state: Optional[str] = None,
        access_type: str = "offline",
        prompt: str = "consent",
    ) -> str:
        """
        Generate the Google OAuth authorization URL.

        Args:
            scopes: OAuth scopes to request (e.g., LOGIN_SCOPES)
            state: Optional opaque value echoed back to the callback
            access_type: "offline" so Google issues a refresh token
            prompt: "consent" forces the consent screen, so a refresh token
                    is issued even on repeat logins

        Returns:
            Full authorization URL to redirect the user to
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "access_type": access_type,
            "prompt": prompt,
        }
        if state:
            params["state"] = state

        auth_url = f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

        logger.info(f"Generated Google auth URL with {len(scopes)} scopes")

        return auth_url

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            code: Authorization code from Google callback

        Returns:
            OAuthTokens with access_token, refresh_token, expiry_date, id_token

        Raises:
            AuthenticationError: If token exchange fails
        """
        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

        logger.info("Exchanging authorization code for tokens")

        async with self._http() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=token_data)
            except httpx.RequestError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            error_msg = _error_description(response)
            logger.error(f"Token exchange failed: {error_msg}")
            raise AuthenticationError(f"Token exchange failed: {error_msg}")

        try:
            token_response = GoogleTokenResponse(**response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed token response: {e}")
            raise AuthenticationError("Token exchange failed: malformed response")

        tokens = OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expiry_date=token_response.get_expiry_date(),
            scope=token_response.scope,
            id_token=token_response.id_token,
        )

        logger.info(f"Received tokens: {tokens.describe()}")

        return tokens

    # -------------------------------------------------------------------------
    # IDENTITY VERIFICATION
    # -------------------------------------------------------------------------

    async def verify_id_token(self, id_token: str, access_token: Optional[str] = None) -> UserInfo:
        """
        Verify a Google id_token and extract the signed-in identity.

        Checks the RS256 signature against Google's JWKS, that "aud" is our
        client id, that "iss" is Google, expiry, and (when an access token
        is given) the at_hash binding between the two tokens.

        Raises:
            AuthenticationError: If the token is missing, forged, expired,
                                 issued for another client, or has no email
        """
        if not id_token:
            raise AuthenticationError("No id_token returned by Google")

        certs = await self._get_certs()
        if not _has_signing_key(certs, id_token):
            # Google rotated its keys since the cache was filled
            certs = await self._get_certs(force=True)

        try:
            payload = jwt.decode(
                id_token,
                certs,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=GOOGLE_ISSUERS,
                access_token=access_token,
            )
        except JWTError as e:
            logger.warning(f"id_token verification failed: {e}")
            raise AuthenticationError(f"Invalid id_token: {e}")

        try:
            claims = GoogleIdTokenClaims(**payload)
        except ValidationError as e:
            raise AuthenticationError(f"Invalid id_token payload: {e}")

        if not claims.email:
            raise AuthenticationError("id_token carries no email claim")

        logger.info(f"User authenticated: {claims.email}")

        return UserInfo(provider_user_id=claims.sub, email=claims.email, name=claims.name)

    async def _get_certs(self, force: bool = False) -> dict:
        """Google's JWKS, cached for CERTS_CACHE_SECONDS unless force is set."""
        fresh = time.monotonic() - self._certs_fetched_at < self.CERTS_CACHE_SECONDS
        if self._certs and fresh and not force:
            return self._certs

        async with self._http() as client:
            try:
                response = await client.get(self.CERTS_URL)
            except httpx.RequestError as e:
                logger.error(f"Network error fetching Google certs: {e}")
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Failed to fetch Google certs: {response.status_code}")
            raise AuthenticationError("Could not fetch Google signing keys")

        self._certs = response.json()
        self._certs_fetched_at = time.monotonic()
        return self._certs


def _has_signing_key(certs: dict, id_token: str) -> bool:
    """Whether certs holds the key named by the token's "kid" header."""
    try:
        kid = jwt.get_unverified_header(id_token).get("kid")
    except JWTError:
        # Malformed; let jwt.decode report it
        return True
    if kid is None:
        return True
    return any(key.get("kid") == kid for key in certs.get("keys", []))


def _error_description(response: httpx.Response) -> str:
    """Best human-readable error from a Google OAuth error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return data.get("error_description") or data.get("error") or response.text
    return response.text
